#!/usr/bin/env python3
"""
Database initialization script for the Valorant Dashboard session store.
Creates the sessions table, removes expired rows and imports a legacy
sessions.json file if one is present.
"""

import asyncio
import sys
import os

# Add the src directory to the Python path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), 'src'))

from valorant_dashboard.database.connection import init_db


async def main():
    print("Initializing session database...")
    try:
        await init_db()
        print("Session database initialized successfully")
    except Exception as e:
        print(f"Error initializing session database: {e}")
        return 1
    return 0


if __name__ == "__main__":
    exit_code = asyncio.run(main())
    sys.exit(exit_code)
