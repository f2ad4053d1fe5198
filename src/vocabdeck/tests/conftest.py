"""Test configuration."""
import os
from datetime import date
from pathlib import Path

import pytest
from dotenv import load_dotenv

# Set test environment before any imports
os.environ["ENV"] = "test"

# Load test environment variables
test_env_path = Path(__file__).resolve().parents[3] / ".env.test"
load_dotenv(test_env_path)
os.environ.setdefault("DATABASE_URL", "sqlite:///test_vocabdeck.db")
os.environ.setdefault("DATA_DIR", "./test_data")

# Import after environment setup
from vocabdeck.config import ensure_directories


@pytest.fixture(autouse=True)
def setup_test_environment():
    """Set up test environment before each test."""
    ensure_directories()
    yield


@pytest.fixture
def today() -> date:
    """A fixed calendar day for date arithmetic."""
    return date(2024, 5, 1)
