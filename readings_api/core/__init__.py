"""Core module - modelos de dominio compartidos por storage, hub y alertas."""
