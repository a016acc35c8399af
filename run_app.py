# run_app.py
import sys
from pathlib import Path

# Ensure project root is on sys.path
ROOT = Path(__file__).resolve().parent
sys.path.insert(0, str(ROOT))

# Streamlit entrypoint: streamlit run run_app.py
from drplant.app import main  # relative imports inside drplant.app will work now
if __name__ == "__main__":
    main()
