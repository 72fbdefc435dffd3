"""
Entry point for Markup Review

Run this script to start the application:
    python run.py path/to/image.jpg
"""

import sys
from pathlib import Path

# Add project root to Python path
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))

# Import and run main
from markup_review.main import main

if __name__ == "__main__":
    main()
