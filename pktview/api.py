"""
pktview - FastAPI Server
Upload, browse and export textual packet captures

Parsed results are kept in a bounded in-memory store and served read-only:
pagination, search/protocol filtering and export never modify them.
"""

import re
import threading
import uuid
from collections import OrderedDict
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Dict, Any, Optional
from urllib.parse import quote
import logging

from fastapi import FastAPI, UploadFile, File, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response
from pydantic import BaseModel
from starlette.concurrency import run_in_threadpool

# Internal imports
from . import __version__, config
from .models import CaptureFormat, ParseResult
from .parsers import parse_packet_data, get_all_parsers
from .analysis import (
    PROTOCOL_FILTERS,
    MIME_TYPES,
    FILE_EXTENSIONS,
    filter_packets,
    protocol_stats,
    paginate,
    packet_breakdown,
    export_packets
)

# Logging setup
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger("pktview")

# FastAPI app
app = FastAPI(
    title="pktview",
    description="Normalize and browse textual network capture exports",
    version=__version__,
    docs_url="/api/docs",
    redoc_url="/api/redoc"
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ==================== Result Store ====================

@dataclass
class StoredResult:
    """Parsed upload kept for browsing"""
    result_id: str
    filename: str
    result: ParseResult
    size_chars: int
    created_at: datetime = field(default_factory=datetime.now)

    def summary(self) -> Dict[str, Any]:
        base = self.result.summary()
        base.update({
            "result_id": self.result_id,
            "filename": self.filename,
            "size_chars": self.size_chars,
            "created_at": self.created_at.isoformat()
        })
        return base


class ResultStore:
    """Bounded store of parse results, oldest evicted first"""

    def __init__(self, max_results: int = 32):
        self.max_results = max_results
        self._results: "OrderedDict[str, StoredResult]" = OrderedDict()
        self._lock = threading.Lock()

    def add(self, filename: str, result: ParseResult, size_chars: int) -> StoredResult:
        stored = StoredResult(
            result_id=uuid.uuid4().hex,
            filename=filename,
            result=result,
            size_chars=size_chars
        )
        with self._lock:
            self._results[stored.result_id] = stored
            while len(self._results) > self.max_results:
                evicted_id, _ = self._results.popitem(last=False)
                logger.info(f"Evicted result: {evicted_id}")
        return stored

    def get(self, result_id: str) -> Optional[StoredResult]:
        with self._lock:
            return self._results.get(result_id)

    def remove(self, result_id: str) -> bool:
        with self._lock:
            return self._results.pop(result_id, None) is not None

    def clear(self):
        with self._lock:
            self._results.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._results)


results = ResultStore(max_results=config.MAX_RESULTS)


# ==================== Pydantic Models ====================

class ParseRequest(BaseModel):
    """Pasted content parse request"""
    content: str
    filename: str = "pasted-content.txt"


class ResultSummary(BaseModel):
    """Parse result summary"""
    result_id: str
    filename: str
    format: str
    totalPackets: int
    protocols: Dict[str, int]
    size_chars: int
    created_at: str


# ==================== Helpers ====================

async def _parse_and_store(text: str, filename: str) -> StoredResult:
    """Parse a payload, off the event loop when it is large"""
    if len(text) > config.OFFLOAD_THRESHOLD:
        logger.info(f"Parsing {filename} ({len(text)} chars) in worker thread")
        result = await run_in_threadpool(parse_packet_data, text)
    else:
        result = parse_packet_data(text)

    stored = results.add(filename, result, len(text))
    logger.info(
        f"Parsed {filename}: {result.total_packets} packets "
        f"as {result.format.value} (id={stored.result_id})"
    )
    return stored


def _get_stored(result_id: str) -> StoredResult:
    stored = results.get(result_id)
    if stored is None:
        raise HTTPException(status_code=404, detail=f"Result not found: {result_id}")
    return stored


def _content_disposition(filename: str) -> str:
    """Attachment header with an ASCII fallback name and the RFC 5987 UTF-8 name"""
    fallback = re.sub(r'[^A-Za-z0-9._-]', "", filename)
    if not fallback or fallback.startswith("."):
        fallback = f"packets{fallback}"
    return f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{quote(filename)}"


# ==================== API Endpoints ====================

@app.get("/")
async def root():
    """API root"""
    return {
        "name": "pktview",
        "version": __version__,
        "endpoints": {
            "upload": "/api/upload",
            "parse": "/api/parse",
            "results": "/api/results/{result_id}",
            "packets": "/api/results/{result_id}/packets",
            "export": "/api/results/{result_id}/export",
            "docs": "/api/docs"
        }
    }


@app.get("/api/info")
async def get_info():
    """System information"""
    return {
        "parsers": [
            {
                "name": p.name,
                "format": p.format.value
            }
            for p in get_all_parsers()
        ],
        "formats": [f.value for f in CaptureFormat],
        "accepted_extensions": list(config.ACCEPTED_EXTENSIONS),
        "protocol_filters": PROTOCOL_FILTERS,
        "export_formats": list(MIME_TYPES),
        "page_size": config.PAGE_SIZE
    }


@app.post("/api/upload", response_model=ResultSummary)
async def upload_capture(file: UploadFile = File(...)):
    """
    Upload a capture export

    Supported formats:
    - *.txt (Wireshark text dissection, tcpdump output)
    - *.json (packet arrays, tshark -T ek / Elasticsearch documents)
    - *.csv (packet tables)
    - *.pcap, *.pcapng (read as text only, binary content is not decoded)
    """
    filename = file.filename or "upload.txt"
    suffix = Path(filename).suffix.lower()
    if suffix and suffix not in config.ACCEPTED_EXTENSIONS:
        raise HTTPException(status_code=400, detail=f"Unsupported file type: {suffix}")

    raw = await file.read()
    if len(raw) > config.MAX_UPLOAD_BYTES:
        raise HTTPException(
            status_code=413,
            detail=f"File too large: {len(raw)} bytes (limit {config.MAX_UPLOAD_BYTES})"
        )

    # Handle UTF-8 BOM encoding (common in Windows exports)
    text = raw.decode("utf-8-sig", errors="replace")

    try:
        stored = await _parse_and_store(text, filename)
    except Exception as e:
        logger.exception(f"Parsing failed: {filename}")
        raise HTTPException(status_code=500, detail=str(e))

    return stored.summary()


@app.post("/api/parse", response_model=ResultSummary)
async def parse_content(request: ParseRequest):
    """Parse pasted capture text"""
    if not request.content.strip():
        raise HTTPException(status_code=400, detail="No content to parse")

    try:
        stored = await _parse_and_store(request.content, request.filename)
    except Exception as e:
        logger.exception(f"Parsing failed: {request.filename}")
        raise HTTPException(status_code=500, detail=str(e))

    return stored.summary()


@app.get("/api/results/{result_id}", response_model=ResultSummary)
async def get_result(result_id: str):
    """Parse result summary"""
    return _get_stored(result_id).summary()


@app.get("/api/results/{result_id}/packets")
async def get_packets(
    result_id: str,
    query: str = Query("", description="Search source, destination, protocol and info"),
    protocol: str = Query("all", description="Protocol filter (substring)"),
    page: int = Query(1, ge=1, description="1-based page number"),
    page_size: int = Query(config.PAGE_SIZE, ge=1, le=config.MAX_PAGE_SIZE)
):
    """Paginated, filtered packet list"""
    stored = _get_stored(result_id)
    filtered = filter_packets(stored.result.packets, query=query, protocol=protocol)

    response = paginate(filtered, page=page, page_size=page_size).to_dict()
    response.update({
        "result_id": result_id,
        "format": stored.result.format.value,
        "totalPackets": stored.result.total_packets,
        "filtered_count": len(filtered),
        "protocols": protocol_stats(filtered)
    })
    return response


@app.get("/api/results/{result_id}/packets/{index}")
async def get_packet(result_id: str, index: int):
    """Single packet with its details and per-layer breakdown (0-based index)"""
    stored = _get_stored(result_id)
    packets = stored.result.packets
    if index < 0 or index >= len(packets):
        raise HTTPException(status_code=404, detail=f"Packet index out of range: {index}")

    packet = packets[index].to_dict()
    packet["index"] = index
    packet["breakdown"] = packet_breakdown(packets[index])
    return packet


@app.get("/api/results/{result_id}/export")
async def export_result(
    result_id: str,
    fmt: str = Query("json", alias="format", description="Output format: text, json, csv"),
    query: str = Query("", description="Only export packets matching this search"),
    protocol: str = Query("all", description="Only export this protocol")
):
    """Download the (optionally filtered) packets"""
    stored = _get_stored(result_id)
    packets = filter_packets(stored.result.packets, query=query, protocol=protocol)

    try:
        content = export_packets(packets, fmt)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    fmt = fmt.lower()
    stem = stored.filename.split(".")[0] or "packets"
    return Response(
        content=content,
        media_type=MIME_TYPES[fmt],
        headers={
            "Content-Disposition": _content_disposition(f"{stem}.{FILE_EXTENSIONS[fmt]}")
        }
    )


@app.delete("/api/results/{result_id}")
async def delete_result(result_id: str):
    """Discard a parse result"""
    if not results.remove(result_id):
        raise HTTPException(status_code=404, detail=f"Result not found: {result_id}")
    return {"success": True, "result_id": result_id}


# ==================== Health Check ====================

@app.get("/health")
async def health_check():
    """Health check"""
    return {
        "status": "healthy",
        "results_stored": len(results),
        "timestamp": datetime.now().isoformat()
    }


# ==================== Main ====================

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=config.HOST, port=config.PORT)
