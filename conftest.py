import sys
from pathlib import Path
import os

# Ensure repo root on sys.path for imports from anywhere in tests tree.
ROOT = Path(__file__).resolve().parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

os.environ.setdefault("PAVILION_PACKAGE_ID", "0xpavilion")
os.environ.setdefault("SUI_RPC_URL", "https://rpc.test.invalid")
os.environ.setdefault("WALRUS_AGGREGATOR_URL", "https://aggregator.test.invalid")
os.environ.setdefault("CHAIN_MAX_ATTEMPTS", "3")
