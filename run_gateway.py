#!/usr/bin/env python3
"""
Start the Agent Demo gateway.

Tools from MCP servers and skills are discovered during startup, before the
server accepts requests.
"""
import uvicorn

from agent_demo import config
from agent_demo.gateway.app import create_app


if __name__ == "__main__":
    host = config.gateway_host()
    port = config.gateway_port()

    print(f"Starting Agent Demo on http://{host}:{port}")
    print(f"Chat endpoint: POST http://{host}:{port}/api/chat")
    print(f"Health check: http://{host}:{port}/health")
    print()

    uvicorn.run(create_app(), host=host, port=port)
