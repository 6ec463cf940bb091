from .page_record import CHEMISTRY_PENDING, PageRecord

__all__ = ["CHEMISTRY_PENDING", "PageRecord"]
