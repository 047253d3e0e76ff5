"""Entry point for running as module: python -m avbridge"""

# Load .env file before importing anything else
from dotenv import load_dotenv
load_dotenv()

from avbridge.cli import run

if __name__ == "__main__":
    run()
