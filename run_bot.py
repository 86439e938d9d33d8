"""
Run script for the Guildcord bot without installing the package.
"""
import sys
from pathlib import Path

project_root = Path(__file__).parent
sys.path.insert(0, str(project_root / "src"))

if __name__ == "__main__":
    from guildcord.main import main
    sys.exit(main())
