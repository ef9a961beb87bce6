"""HTTP trigger surface: FastAPI app around an EngineManager."""
