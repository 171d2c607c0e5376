"""Screen widgets for the RentalOrders UI."""

from rental_orders.ui.screens.new_order_screen import NewOrderScreen
from rental_orders.ui.screens.order_details_dialog import OrderDetailsDialog
from rental_orders.ui.screens.orders_screen import OrdersScreen

__all__ = [
    "NewOrderScreen",
    "OrderDetailsDialog",
    "OrdersScreen",
]
