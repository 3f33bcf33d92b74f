"""LayAdmin: admin panel bootstrap for FastAPI applications."""

VERSION = "v3.0.0"
