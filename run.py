"""
Entry point for Drawing Markup

Run this script to mark up a drawing:
    python run.py drawing.png --finding F-102 --name "A-101 Floor Plan"
"""

import sys
from pathlib import Path

# Add project root to Python path
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))

# Import and run main
from drawing_markup.main import main

if __name__ == "__main__":
    main()
