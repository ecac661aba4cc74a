from .registry import register
from .proforma import create as create_proforma
from .quotation import create as create_quotation

def bootstrap() -> None:
    # Register all layouts here
    register(create_proforma())
    register(create_quotation())
