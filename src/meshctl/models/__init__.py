"""Data models for meshctl."""

from .meshmodel import Category, Model, ModelListResponse

__all__ = ["Category", "Model", "ModelListResponse"]
