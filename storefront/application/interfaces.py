from abc import ABC, abstractmethod
from typing import Optional, List
from storefront.domain.models import Order, OrderStatus, Product, User


class OrderRepository(ABC):
    @abstractmethod
    async def get_by_id(self, order_id: str) -> Optional[Order]:
        pass

    @abstractmethod
    async def create(self, order: Order) -> None:
        pass

    @abstractmethod
    async def list_by_user(self, user_id: str, offset: int, limit: int) -> List[Order]:
        """Заказы пользователя в порядке создания"""
        pass

    @abstractmethod
    async def count_by_user(self, user_id: str) -> int:
        pass

    @abstractmethod
    async def list_all(self, offset: int, limit: int) -> List[Order]:
        """Все заказы, новые первыми"""
        pass

    @abstractmethod
    async def count_all(self) -> int:
        pass

    @abstractmethod
    async def update_status(
        self, order_id: str, status: OrderStatus, expected_status: Optional[OrderStatus] = None
    ) -> Optional[Order]:
        """Обновляет статус и возвращает заказ.
        None, если заказа нет или его статус уже не expected_status."""
        pass

    @abstractmethod
    async def save(self, order: Order, expected_status: OrderStatus) -> bool:
        """Сохраняет status и return_reason, если в хранилище все еще expected_status.
        Возвращает False, если статус успели изменить."""
        pass


class ProductRepository(ABC):
    @abstractmethod
    async def get_by_id(self, product_id: str) -> Optional[Product]:
        pass

    @abstractmethod
    async def get_active(self, product_id: str) -> Optional[Product]:
        pass

    @abstractmethod
    async def get_by_ids(self, product_ids: List[str], active_only: bool = True) -> List[Product]:
        pass

    @abstractmethod
    async def exists(self, product_id: str) -> bool:
        pass

    @abstractmethod
    async def decrement_stock(self, product_id: str, quantity: int) -> bool:
        """Атомарно уменьшает остаток, если товар активен и stock >= quantity.
        Возвращает False, если ни одна строка не изменилась."""
        pass

    @abstractmethod
    async def increment_stock(self, product_id: str, quantity: int) -> bool:
        pass

    @abstractmethod
    async def set_stock(self, product_id: str, stock: int) -> Optional[Product]:
        pass


class UserRepository(ABC):
    @abstractmethod
    async def get_by_id(self, user_id: str) -> Optional[User]:
        pass

    @abstractmethod
    async def get_by_ids(self, user_ids: List[str]) -> List[User]:
        pass

    @abstractmethod
    async def exists(self, user_id: str) -> bool:
        pass


class UnitOfWork(ABC):
    @property
    @abstractmethod
    def orders(self) -> OrderRepository:
        pass

    @property
    @abstractmethod
    def products(self) -> ProductRepository:
        pass

    @property
    @abstractmethod
    def users(self) -> UserRepository:
        pass

    @abstractmethod
    async def __call__(self):
        pass

    @abstractmethod
    async def commit(self):
        pass

    @abstractmethod
    async def rollback(self):
        pass
