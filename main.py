"""
Entry point for the Movies API
"""

import sys
import os
import logging
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

# Add src directory to Python path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), 'src'))

from config.settings import PORT, LOG_LEVEL

# Configure logging
logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)
logger = logging.getLogger(__name__)

from app import app

if __name__ == "__main__":
    import uvicorn
    logger.info(f"Starting Movies API on port {PORT}")
    uvicorn.run(app, host="0.0.0.0", port=PORT)
