from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent
INDEX_URL = "https://chaos-data.projectdiscovery.io/index.json"
INDEX_CACHE_PATH = BASE_DIR / "index.json"
CORPUS_DIR = BASE_DIR / "chaos"
CONSOLIDATED_FILE_NAME = "consolidated.txt"
