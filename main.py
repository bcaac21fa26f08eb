"""
FastAPI Backend for ClauseSplit - legal document segmentation
"""
from fastapi import FastAPI, File, Form, UploadFile, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel
import uvicorn
from pathlib import Path
import shutil
import tempfile
from typing import Any, Dict, Optional
from dotenv import load_dotenv
import os

# Load environment variables
load_dotenv()

from app.api.document import get_factory, process_document, process_file
from app.models.segment import ProcessingResult
from app.rag.loader import SUPPORTED_EXTENSIONS

# Initialize FastAPI app
app = FastAPI(
    title="ClauseSplit API",
    description="Hierarchical segmentation of statutes and contracts for retrieval",
    version="1.0.0"
)

# Configure CORS for frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:5173", "http://localhost:3000", "http://localhost:8080"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Directories
UPLOADS_DIR = Path(os.getenv("UPLOADS_DIR", Path(__file__).parent / "data" / "uploads"))


class SplitRequest(BaseModel):
    text: str
    metadata: Optional[Dict[str, Any]] = None
    document_type: Optional[str] = None
    filename: Optional[str] = None


@app.get("/")
async def root():
    """Health check endpoint"""
    return {
        "status": "operational",
        "service": "ClauseSplit API",
        "version": "1.0.0"
    }


@app.get("/health")
async def health_check():
    """Extended health check with splitter configuration"""
    factory = get_factory()
    return {
        "status": "healthy",
        "splitters": {
            "legal": factory.splitter_type(factory.legal_splitter),
            "contract": factory.splitter_type(factory.contract_splitter),
            "generic": factory.splitter_type(factory.recursive_splitter),
        },
        "settings": factory.settings.model_dump(),
    }


@app.post("/split", response_model=ProcessingResult)
async def split_text(request: SplitRequest):
    """
    Split raw text into segments
    """
    metadata = dict(request.metadata or {})
    if request.filename:
        metadata.setdefault("original_filename", request.filename)

    return process_document(
        request.text,
        metadata,
        document_type=request.document_type,
    )


@app.post("/upload", response_model=ProcessingResult)
async def upload_document(
    file: UploadFile = File(...),
    document_type: Optional[str] = Form(None),
):
    """
    Upload a statute or contract (PDF or TXT) and split it
    """
    # Validate file type
    if not file.filename or Path(file.filename).suffix.lower() not in SUPPORTED_EXTENSIONS:
        raise HTTPException(status_code=400, detail="Only PDF and TXT files are supported")

    try:
        UPLOADS_DIR.mkdir(parents=True, exist_ok=True)
        # Per-request scratch directory keeps the original filename, removed after splitting
        with tempfile.TemporaryDirectory(dir=UPLOADS_DIR) as scratch:
            file_path = Path(scratch) / Path(file.filename).name
            with file_path.open("wb") as buffer:
                shutil.copyfileobj(file.file, buffer)

            return process_file(str(file_path), document_type=document_type)

    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error processing document: {str(e)}")


if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=8000,
        reload=True
    )
