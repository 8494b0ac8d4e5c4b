"""
CLI module entry point.

This allows the CLI to be run as:
python -m bq_replication
"""

from bq_replication.main import main

if __name__ == "__main__":
    exit(main())
