"""
Configuration
=============

Environment-driven defaults. Values can be overridden on the command line.
"""

import os

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

# --- Provider credentials ---
OPENAI_API_KEY = os.getenv("OPENAI_API_KEY")
ANTHROPIC_API_KEY = os.getenv("ANTHROPIC_API_KEY")
GEMINI_API_KEY = os.getenv("GEMINI_API_KEY")
GROQ_API_KEY = os.getenv("GROQ_API_KEY")
COHERE_API_KEY = os.getenv("COHERE_API_KEY")

# Ollama ignores the key but the OpenAI client insists on one
OLLAMA_API_KEY = "ollama"

# --- Evaluation defaults ---
DB_PATH = os.getenv("NL2SQL_DB_PATH", "ecommerce-autogen.db")
GROUND_TRUTH_PATH = os.getenv("NL2SQL_GROUND_TRUTH", "ground-truth.md")
LOCAL_BASE_URL = os.getenv("NL2SQL_LOCAL_BASE_URL", "http://localhost:11434/v1")
GROQ_BASE_URL = "https://api.groq.com/openai/v1"

DEFAULT_MODEL_KEY = os.getenv("NL2SQL_DEFAULT_MODEL", "Ollama/OpenAI : llama3")
JUDGE_MODEL_KEY = os.getenv("NL2SQL_JUDGE_MODEL", "Ollama/OpenAI : llama3")

# Number of repair attempts after the first generation
MAX_RETRIES = int(os.getenv("NL2SQL_MAX_RETRIES", "2"))
