import os
# Configuration for pktview (environment overrides)
HOST = os.getenv("PKTVIEW_HOST", "127.0.0.1")
PORT = int(os.getenv("PKTVIEW_PORT", "8000"))
RELOAD = os.getenv("PKTVIEW_RELOAD", "0") in ("1", "true", "True")
PAGE_SIZE = int(os.getenv("PKTVIEW_PAGE_SIZE", "20"))
MAX_PAGE_SIZE = int(os.getenv("PKTVIEW_MAX_PAGE_SIZE", "500"))
# Payloads longer than this (characters) are parsed in a worker thread
OFFLOAD_THRESHOLD = int(os.getenv("PKTVIEW_OFFLOAD_THRESHOLD", "100000"))
MAX_UPLOAD_BYTES = int(os.getenv("PKTVIEW_MAX_UPLOAD_BYTES", str(50 * 1024 * 1024)))
MAX_RESULTS = int(os.getenv("PKTVIEW_MAX_RESULTS", "32"))
CORS_ORIGINS = [o.strip() for o in os.getenv("PKTVIEW_CORS_ORIGINS", "*").split(",") if o.strip()]
ACCEPTED_EXTENSIONS = (".txt", ".json", ".csv", ".log", ".pcap", ".pcapng")
