"""
Configuration for the Source server query client
"""

import os
from dotenv import load_dotenv

# Load environment variables
load_dotenv()


class Config:
    """Client configuration"""

    # Default per-phase timeout (send and receive each get the full value)
    QUERY_TIMEOUT_MS = int(os.getenv('QUERY_TIMEOUT_MS', '5000'))

    # Logging
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')

    def __repr__(self):
        return f"<Config QUERY_TIMEOUT_MS={self.QUERY_TIMEOUT_MS} LOG_LEVEL={self.LOG_LEVEL}>"


# Singleton instance
config = Config()
