"""Pipeline de ingesta: validar → persistir → broadcast → alerta."""

from .ingestion import IngestionPipeline

__all__ = ["IngestionPipeline"]
