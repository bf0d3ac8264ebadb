# cx_hub/adaptation/__init__.py
from cx_hub.adaptation.adapter import Adapter
from cx_hub.adaptation.category import CategoryAdapter
from cx_hub.adaptation.models import CategoryAdaptation, TitleAdaptation

__all__ = ["Adapter", "CategoryAdapter", "CategoryAdaptation", "TitleAdaptation"]
