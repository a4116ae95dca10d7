# yishaq/models/__init__.py
from .catalog import *           # Category, Product
from .user import *              # User
from .order import *             # Order, OrderItem
from .order_status_log import *  # OrderStatusLog
from .stock_audit import *       # StockAudit
