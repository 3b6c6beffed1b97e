import os
from pydantic import BaseModel

class Settings(BaseModel):
    default_vertex_distance_mm: float = float(os.getenv("RX_DEFAULT_VERTEX_MM", "12"))
    vertex_compensation_threshold_d: float = float(os.getenv("RX_VERTEX_THRESHOLD_D", "4.0"))
    log_level: str = os.getenv("RX_LOG_LEVEL", "INFO")

settings = Settings()
