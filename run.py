#!/usr/bin/env python3
"""Run the MCP server."""
from mobile_native_workflow.main import main

if __name__ == "__main__":
    main()
