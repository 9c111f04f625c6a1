import base64
import hashlib

from fastapi import FastAPI, UploadFile, File, HTTPException
from .models import StandardizeResponse, HealthResponse
from .normalize import describe_decode_failure, standardize_bytes
from .rules import TARGET_EXTENSIONS

app = FastAPI(
    title="source-standardizer",
    description="Convert source files to UTF-8 without BOM and CRLF line endings",
    version="0.1.0",
)


def _sha256_hex(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


@app.get("/health", response_model=HealthResponse)
def health():
    return {"ok": True}


@app.post("/standardize", response_model=StandardizeResponse)
async def standardize_source(file: UploadFile = File(...)):
    if not (file.filename or "").lower().endswith(TARGET_EXTENSIONS):
        raise HTTPException(
            status_code=422,
            detail=f"Only {', '.join(TARGET_EXTENSIONS)} files are supported",
        )

    raw = await file.read()
    try:
        bom, outcome, converted = standardize_bytes(raw)
    except UnicodeDecodeError as e:
        raise HTTPException(status_code=422, detail=describe_decode_failure(e))

    standardized = None
    if converted is not None:
        standardized = {
            "sha256": _sha256_hex(converted),
            "encoding": "utf-8",
            "line_terminator": "crlf",
            "content_b64": base64.b64encode(converted).decode("ascii"),
        }
    return {"outcome": outcome, "bom": bom, "standardized": standardized}
