from .settings import Settings, UserPermission
from .users import User, Session, Address
from .stores import Store, Staff, PaymentMethod, ShippingMethod
from .catalog import Category, Product, ProductAttribute
from .coupons import Coupon
from .orders import Order, OrderedItem

__all__ = [
    'Settings', 'UserPermission',
    'User', 'Session', 'Address',
    'Store', 'Staff', 'PaymentMethod', 'ShippingMethod',
    'Category', 'Product', 'ProductAttribute',
    'Coupon',
    'Order', 'OrderedItem',
]
