"""Remote data gateway over the Supabase tables, scoped to the signed-in user."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from postgrest.exceptions import APIError
from supabase import Client

from grocery_tracker.constants import PFAND_CATEGORY_NAME
from grocery_tracker.domain.errors import (
    AuthenticationError,
    DuplicateNameError,
    GatewayError,
    NotFoundError,
    ReservedCategoryError,
    ValidationError,
)
from grocery_tracker.domain.models import (
    Category,
    Item,
    Market,
    Purchase,
    PurchaseDraft,
    PurchaseLineItem,
)
from grocery_tracker.logging_config import get_logger

logger = get_logger(__name__)

UNIQUE_VIOLATION = "23505"


def _is_duplicate(error: APIError) -> bool:
    message = getattr(error, "message", None) or str(error)
    return getattr(error, "code", None) == UNIQUE_VIOLATION or "duplicate" in message.lower()


def _get_single_row(query_result) -> Optional[Dict[str, Any]]:
    data = getattr(query_result, "data", None) or []
    if not data:
        return None
    return data[0]


def _clean_name(name: Optional[str], kind: str) -> str:
    cleaned = (name or "").strip()
    if not cleaned:
        raise ValidationError(f"Please enter a {kind} name")
    return cleaned


def _category_from_row(row: Dict[str, Any]) -> Category:
    return Category.model_validate(
        {"id": row["id"], "name": row["name"], "createdAt": row.get("created_at") or datetime.now()}
    )


def _item_from_row(row: Dict[str, Any]) -> Item:
    return Item.model_validate(
        {
            "id": row["id"],
            "name": row["name"],
            "category": row.get("category_id"),
            "createdAt": row.get("created_at") or datetime.now(),
        }
    )


def _market_from_row(row: Dict[str, Any]) -> Market:
    return Market.model_validate(
        {
            "id": row["id"],
            "name": row["name"],
            "location": row.get("location"),
            "createdAt": row.get("created_at") or datetime.now(),
        }
    )


class RemoteGateway:
    """Row-scoped access to categories, items, markets and purchases.

    Every query on an owned table filters on the id of the user behind the
    current session, and every insert into one stamps it. Purchase lines
    are reached through their purchase.
    """

    def __init__(self, client: Client, access_token: Optional[str] = None) -> None:
        self.client = client
        self.access_token = access_token
        self._user_id: Optional[str] = None

    # --- session ---
    def current_user_id(self) -> Optional[str]:
        if self._user_id is not None:
            return self._user_id
        try:
            response = self.client.auth.get_user(self.access_token)
        except Exception as exc:
            logger.warning("Unable to resolve session user: %s", exc)
            return None
        user = getattr(response, "user", None) if response else None
        if user is None:
            return None
        self._user_id = str(user.id)
        return self._user_id

    def require_user(self) -> str:
        user_id = self.current_user_id()
        if user_id is None:
            raise AuthenticationError("User must be authenticated")
        return user_id

    def get_user_role(self) -> str:
        """Role from the user_roles side table; standard user when absent."""
        user_id = self.require_user()
        result = self.client.table("user_roles").select("role").eq("user_id", user_id).execute()
        row = _get_single_row(result)
        return row.get("role", "user") if row else "user"

    # --- low level ---
    def _insert(
        self, table: str, row: Dict[str, Any], *, kind: str, name: str = "", owned: bool = True
    ) -> Dict[str, Any]:
        """Insert one row; owned tables get the session user stamped on it."""
        user_id = self.require_user()
        if owned:
            row = {"user_id": user_id, **row}
        try:
            response = self.client.table(table).insert(row).execute()
        except APIError as exc:
            if _is_duplicate(exc):
                raise DuplicateNameError(kind, name) from exc
            raise GatewayError(f"Unable to create {kind}: {exc}") from exc
        created = _get_single_row(response)
        if created is None:
            raise GatewayError(f"Unable to create {kind}")
        return created

    def _select_owned(self, table: str, columns: str = "*", order: Optional[str] = "name"):
        user_id = self.require_user()
        query = self.client.table(table).select(columns).eq("user_id", user_id)
        if order:
            query = query.order(order)
        return query.execute().data or []

    def _get_owned(self, table: str, row_id: str, kind: str) -> Dict[str, Any]:
        user_id = self.require_user()
        result = self.client.table(table).select("*").eq("id", row_id).eq("user_id", user_id).execute()
        row = _get_single_row(result)
        if row is None:
            raise NotFoundError(kind, row_id)
        return row

    def _update_owned(
        self, table: str, row_id: str, updates: Dict[str, Any], *, kind: str, name: str = ""
    ) -> None:
        user_id = self.require_user()
        try:
            self.client.table(table).update(updates).eq("id", row_id).eq("user_id", user_id).execute()
        except APIError as exc:
            if _is_duplicate(exc):
                raise DuplicateNameError(kind, name) from exc
            raise GatewayError(f"Unable to update {kind}: {exc}") from exc

    def _delete_owned(self, table: str, row_id: str) -> None:
        user_id = self.require_user()
        self.client.table(table).delete().eq("id", row_id).eq("user_id", user_id).execute()

    def find_id_by_name(self, table: str, name: str) -> Optional[str]:
        user_id = self.require_user()
        result = self.client.table(table).select("id").eq("user_id", user_id).eq("name", name).execute()
        row = _get_single_row(result)
        return str(row["id"]) if row else None

    def count_categories(self) -> int:
        user_id = self.require_user()
        result = (
            self.client.table("categories")
            .select("id", count="exact")
            .eq("user_id", user_id)
            .execute()
        )
        return result.count or 0

    # --- categories ---
    def insert_category(self, name: str) -> str:
        return str(self._insert("categories", {"name": name}, kind="category", name=name)["id"])

    def list_categories(self) -> List[Category]:
        """Return the user's categories, creating Pfand if it is missing."""
        rows = self._select_owned("categories")
        if not any(row.get("name") == PFAND_CATEGORY_NAME for row in rows):
            try:
                self.insert_category(PFAND_CATEGORY_NAME)
            except DuplicateNameError:
                logger.debug("Pfand category created concurrently")
            rows = self._select_owned("categories")
        return [_category_from_row(row) for row in rows]

    def add_category(self, name: str) -> Category:
        cleaned = _clean_name(name, "category")
        if cleaned.lower() == PFAND_CATEGORY_NAME.lower():
            raise ReservedCategoryError("Pfand category already exists")
        category_id = self.insert_category(cleaned)
        return _category_from_row(self._get_owned("categories", category_id, "category"))

    def rename_category(self, category_id: str, name: str) -> Category:
        cleaned = _clean_name(name, "category")
        row = self._get_owned("categories", category_id, "category")
        if row["name"] == PFAND_CATEGORY_NAME:
            raise ReservedCategoryError("Cannot rename the Pfand category")
        if cleaned.lower() == PFAND_CATEGORY_NAME.lower():
            raise ReservedCategoryError("Pfand category already exists")
        self._update_owned("categories", category_id, {"name": cleaned}, kind="category", name=cleaned)
        return _category_from_row({**row, "name": cleaned})

    def delete_category(self, category_id: str) -> None:
        row = self._get_owned("categories", category_id, "category")
        if row["name"] == PFAND_CATEGORY_NAME:
            raise ReservedCategoryError("Cannot delete the Pfand category")
        self._delete_owned("categories", category_id)

    # --- items ---
    def insert_item(self, name: str, category_id: Optional[str]) -> str:
        row = self._insert("items", {"name": name, "category_id": category_id}, kind="item", name=name)
        return str(row["id"])

    def list_items(self) -> List[Item]:
        return [_item_from_row(row) for row in self._select_owned("items")]

    def add_item(self, name: str, category_id: Optional[str] = None) -> Item:
        cleaned = _clean_name(name, "item")
        item_id = self.insert_item(cleaned, category_id or None)
        return _item_from_row(self._get_owned("items", item_id, "item"))

    def rename_item(self, item_id: str, name: str) -> Item:
        cleaned = _clean_name(name, "item")
        row = self._get_owned("items", item_id, "item")
        self._update_owned("items", item_id, {"name": cleaned}, kind="item", name=cleaned)
        return _item_from_row({**row, "name": cleaned})

    def delete_item(self, item_id: str) -> None:
        self._get_owned("items", item_id, "item")
        self._delete_owned("items", item_id)

    # --- markets ---
    def insert_market(self, name: str, location: Optional[str]) -> str:
        row = self._insert("markets", {"name": name, "location": location}, kind="market", name=name)
        return str(row["id"])

    def list_markets(self) -> List[Market]:
        return [_market_from_row(row) for row in self._select_owned("markets")]

    def add_market(self, name: str, location: Optional[str] = None) -> Market:
        cleaned = _clean_name(name, "market")
        market_id = self.insert_market(cleaned, (location or "").strip() or None)
        return _market_from_row(self._get_owned("markets", market_id, "market"))

    def rename_market(self, market_id: str, name: str) -> Market:
        cleaned = _clean_name(name, "market")
        row = self._get_owned("markets", market_id, "market")
        self._update_owned("markets", market_id, {"name": cleaned}, kind="market", name=cleaned)
        return _market_from_row({**row, "name": cleaned})

    def delete_market(self, market_id: str) -> None:
        self._get_owned("markets", market_id, "market")
        self._delete_owned("markets", market_id)

    # --- purchases ---
    def insert_purchase(
        self,
        *,
        date: datetime,
        total_amount: float,
        market_id: Optional[str] = None,
    ) -> str:
        row = self._insert(
            "purchases",
            {
                "market_id": market_id,
                "date": date.isoformat(),
                "total_amount": total_amount,
            },
            kind="purchase",
        )
        return str(row["id"])

    def insert_purchase_item(self, purchase_id: str, line: PurchaseLineItem, item_id: str) -> str:
        row = self._insert(
            "purchase_items",
            {
                "purchase_id": purchase_id,
                "item_id": item_id,
                "quantity": line.quantity,
                "unit_price": line.unit_price,
            },
            kind="purchase item",
            owned=False,
        )
        return str(row["id"])

    def add_purchase(self, draft: PurchaseDraft) -> Purchase:
        """Insert a purchase header and its lines.

        The returned purchase carries the item and market names as of now; the
        remote tables hold ids only.
        """
        if not draft.lines:
            raise ValidationError("Please add at least one item to the purchase")

        items = {item.id: item for item in self.list_items()}
        market_name = None
        if draft.market_id:
            market_name = self._get_owned("markets", draft.market_id, "market")["name"]

        lines = []
        for line in draft.lines:
            item = items.get(line.item_id)
            if item is None:
                raise ValidationError(f"Unknown item: {line.item_id}")
            lines.append(
                PurchaseLineItem(
                    item_id=item.id,
                    item_name=item.name,
                    quantity=line.quantity,
                    unit_price=line.unit_price,
                )
            )
        purchase = Purchase(date=draft.date, market_id=draft.market_id, market_name=market_name, items=lines)

        purchase_id = self.insert_purchase(
            date=purchase.date,
            total_amount=purchase.total_amount or 0,
            market_id=purchase.market_id,
        )
        for line in purchase.items:
            self.insert_purchase_item(purchase_id, line, line.item_id)
        return purchase.model_copy(update={"id": purchase_id})

    def list_purchases(self) -> List[Purchase]:
        """Assemble purchases with their lines, oldest first.

        Item and market names are joined from the live rows; lines whose item
        was deleted get an empty name.
        """
        headers = self._select_owned("purchases", order="date")
        if not headers:
            return []

        purchase_ids = [row["id"] for row in headers]
        lines = (
            self.client.table("purchase_items")
            .select("*")
            .in_("purchase_id", purchase_ids)
            .order("id")
            .execute()
        ).data or []
        item_names = {str(row["id"]): row["name"] for row in self._select_owned("items", "id, name")}
        market_names = {str(row["id"]): row["name"] for row in self._select_owned("markets", "id, name")}

        lines_by_purchase: Dict[str, List[PurchaseLineItem]] = {}
        for row in lines:
            item_id = str(row["item_id"])
            lines_by_purchase.setdefault(str(row["purchase_id"]), []).append(
                PurchaseLineItem(
                    item_id=item_id,
                    item_name=item_names.get(item_id, ""),
                    quantity=row.get("quantity") or 1,
                    unit_price=row.get("unit_price") or 0,
                )
            )

        purchases = []
        for row in headers:
            purchase_lines = lines_by_purchase.get(str(row["id"]))
            if not purchase_lines:
                logger.warning("Skipping purchase %s without line items", row["id"])
                continue
            market_id = str(row["market_id"]) if row.get("market_id") is not None else None
            purchases.append(
                Purchase.model_validate(
                    {
                        "id": row["id"],
                        "date": row["date"],
                        "marketId": market_id,
                        "marketName": market_names.get(market_id or ""),
                        "items": purchase_lines,
                        "createdAt": row.get("created_at") or row["date"],
                    }
                )
            )
        return purchases

    def delete_purchase(self, purchase_id: str) -> None:
        self._get_owned("purchases", purchase_id, "purchase")
        self.client.table("purchase_items").delete().eq("purchase_id", purchase_id).execute()
        self._delete_owned("purchases", purchase_id)
