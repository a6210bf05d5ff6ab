import sys
import os
from pathlib import Path

# Ensure project root is on sys.path for `import coach_api.*`
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# Default: no upstream chat provider unless a test opts in
os.environ.setdefault("MENTOR_PROVIDER", "none")
os.environ.pop("DEEPSEEK_API_KEY", None)
os.environ.pop("OPENAI_API_KEY", None)
