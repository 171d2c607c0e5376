"""Version information for RentalOrders."""

__app_name__ = "RentalOrders"
__version__ = "1.2.0"
__company__ = "Rental Desk"
