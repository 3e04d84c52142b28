"""Configuration management for ReportChat RAG backend."""
import os
import logging
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# API Keys
GROQ_API_KEY = os.getenv("GROQ_API_KEY")
HUGGINGFACE_API_KEY = os.getenv("HUGGINGFACE_API_KEY")
SUPABASE_URL = os.getenv("SUPABASE_URL")
SUPABASE_KEY = os.getenv("SUPABASE_KEY")

# Chroma vector database (cloud tenant, or a local directory for development)
CHROMA_API_KEY = os.getenv("CHROMA_API_KEY")
CHROMA_TENANT = os.getenv("CHROMA_TENANT")
CHROMA_DATABASE = os.getenv("CHROMA_DATABASE")
CHROMA_PERSIST_DIRECTORY = os.getenv("CHROMA_PERSIST_DIRECTORY")

# Server Configuration
PORT = int(os.getenv("PORT", "8000"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FORMAT = os.getenv("LOG_FORMAT", "text")

# CORS Configuration
CORS_ORIGINS = os.getenv(
    "CORS_ORIGINS",
    "http://localhost:3000,http://localhost:9002"
).split(",")

# Model Configuration
EMBEDDING_MODEL = "sentence-transformers/all-mpnet-base-v2"
GENERATION_MODEL = "llama-3.3-70b-versatile"
EXTRACTION_MODEL = "meta-llama/llama-4-scout-17b-16e-instruct"

# Vector collection
COLLECTION_NAME = "reports-collection"

# Chunking Configuration
CHUNK_SIZE = 1000  # characters

# Retrieval Configuration
MAX_CHUNKS = 5

# Extraction Configuration
MAX_EXTRACTION_PAGES = 5  # images per vision request
PDF_RENDER_DPI = 144

# Report records
REPORTS_TABLE = "reports"
STORAGE_BUCKET = os.getenv("SUPABASE_STORAGE_BUCKET", "reports")

# Logging Configuration
logging.basicConfig(
    level=getattr(logging, LOG_LEVEL),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
