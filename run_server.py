#!/usr/bin/env python
"""Run the pktview server"""
import sys
import os

# Add the project root to the path
project_root = os.path.dirname(os.path.abspath(__file__))
sys.path.insert(0, project_root)

import uvicorn

from pktview import config

if __name__ == "__main__":
    uvicorn.run(
        "pktview.api:app",
        host=config.HOST,
        port=config.PORT,
        reload=config.RELOAD
    )
