"""
Payload validation against column metadata and entity rules.
No application or store needed.
"""

from datetime import datetime
from decimal import Decimal

import pytest
from tablecost.models import Ingredient, OperationalCost, Product, Recipe, Sale
from tablecost.routes.ingredients import INGREDIENT_POLICY
from tablecost.routes.operational_costs import OPERATIONAL_COST_POLICY
from tablecost.routes.products import PRODUCT_POLICY
from tablecost.routes.recipes import RECIPE_POLICY
from tablecost.routes.sales import SALE_POLICY
from tablecost.validation import ValidationError, validate_payload


def _fields(exc_info) -> list[str]:
    return [e["field"] for e in exc_info.value.errors]


def _product(**overrides):
    payload = {"name": "Espresso", "category": "Beverages", "price": "3.50", "cost": 1, "unit": "cup"}
    payload.update(overrides)
    return payload


class TestCoercion:
    def test_valid_product(self):
        patch = validate_payload(model=Product, payload=_product(stock="12"), policy=PRODUCT_POLICY, partial=False)
        assert patch["price"] == Decimal("3.50")
        assert patch["cost"] == Decimal("1")
        assert patch["stock"] == 12
        assert patch["name"] == "Espresso"

    def test_strings_are_stripped(self):
        patch = validate_payload(model=Product, payload=_product(name="  Latte "), policy=PRODUCT_POLICY, partial=False)
        assert patch["name"] == "Latte"

    def test_missing_required_fields_all_reported(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_payload(model=Product, payload={"name": "x"}, policy=PRODUCT_POLICY, partial=False)
        assert str(exc_info.value) == "Invalid product data"
        assert sorted(_fields(exc_info)) == ["category", "cost", "price", "unit"]

    def test_partial_skips_required(self):
        patch = validate_payload(model=Product, payload={"stock": 4}, policy=PRODUCT_POLICY, partial=True)
        assert patch == {"stock": 4}

    def test_unknown_field_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_payload(model=Product, payload=_product(id=5), policy=PRODUCT_POLICY, partial=False)
        assert _fields(exc_info) == ["id"]

    @pytest.mark.parametrize("stock", [1.5, "1e3", "2.0", True, "ten"])
    def test_integer_fields_are_strict(self, stock):
        with pytest.raises(ValidationError) as exc_info:
            validate_payload(model=Product, payload={"stock": stock}, policy=PRODUCT_POLICY, partial=True)
        assert _fields(exc_info) == ["stock"]

    @pytest.mark.parametrize("price", ["abc", "NaN", True, [1]])
    def test_money_must_be_numeric(self, price):
        with pytest.raises(ValidationError) as exc_info:
            validate_payload(model=Product, payload={"price": price}, policy=PRODUCT_POLICY, partial=True)
        assert _fields(exc_info) == ["price"]

    def test_money_upper_bound(self):
        with pytest.raises(ValidationError):
            validate_payload(model=Product, payload={"price": "100000000"}, policy=PRODUCT_POLICY, partial=True)

    def test_null_for_required_column(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_payload(model=Product, payload={"name": None}, policy=PRODUCT_POLICY, partial=True)
        assert exc_info.value.errors[0]["message"] == "name cannot be null"

    def test_null_for_nullable_column(self):
        patch = validate_payload(model=Product, payload={"min_stock": None}, policy=PRODUCT_POLICY, partial=True)
        assert patch == {"min_stock": None}

    def test_blank_string(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_payload(model=Product, payload={"name": "   "}, policy=PRODUCT_POLICY, partial=True)
        assert exc_info.value.errors[0]["message"] == "name cannot be blank"

    def test_max_length(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_payload(model=Product, payload={"unit": "x" * 33}, policy=PRODUCT_POLICY, partial=True)
        assert "max length 32" in exc_info.value.errors[0]["message"]

    def test_boolean_is_strict(self):
        with pytest.raises(ValidationError):
            validate_payload(model=Product, payload={"is_active": "yes"}, policy=PRODUCT_POLICY, partial=True)

    @pytest.mark.parametrize("payload", [None, {}])
    def test_empty_create_payload(self, payload):
        with pytest.raises(ValidationError) as exc_info:
            validate_payload(model=Ingredient, payload=payload, policy=INGREDIENT_POLICY, partial=False)
        assert len(exc_info.value.errors) == 4

    def test_non_object_payload(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_payload(model=Ingredient, payload=[1, 2], policy=INGREDIENT_POLICY, partial=True)
        assert exc_info.value.errors == [{"field": "", "message": "Invalid JSON payload"}]

    def test_to_dict(self):
        error = ValidationError("Invalid sale data", [{"field": "items", "message": "items must be a list"}])
        assert error.to_dict() == {
            "error": "Invalid sale data",
            "errors": [{"field": "items", "message": "items must be a list"}],
        }


class TestProductRules:
    @pytest.mark.parametrize("field,value", [("price", 0), ("cost", "-1"), ("stock", -1), ("min_stock", -2)])
    def test_bounds(self, field, value):
        with pytest.raises(ValidationError) as exc_info:
            validate_payload(model=Product, payload={field: value}, policy=PRODUCT_POLICY, partial=True)
        assert _fields(exc_info) == [field]

    def test_zero_stock_allowed(self):
        assert validate_payload(model=Product, payload={"stock": 0}, policy=PRODUCT_POLICY, partial=True) == {"stock": 0}

    @pytest.mark.parametrize("field,value", [("price", "0.004"), ("cost", "0.001"), ("cost", 0.0049)])
    def test_amount_that_rounds_to_zero_is_rejected(self, field, value):
        """Positivity is checked on the value as stored, at two decimal places."""
        with pytest.raises(ValidationError) as exc_info:
            validate_payload(model=Product, payload={field: value}, policy=PRODUCT_POLICY, partial=True)
        assert exc_info.value.errors == [{"field": field, "message": f"{field} must be > 0"}]

    def test_amount_is_rounded_half_up_to_cents(self):
        patch = validate_payload(model=Product, payload={"cost": "0.005"}, policy=PRODUCT_POLICY, partial=True)
        assert patch["cost"] == Decimal("0.01")
        assert str(patch["cost"]) == "0.01"


class TestIngredientRules:
    def test_free_ingredient_allowed(self):
        patch = validate_payload(model=Ingredient, payload={"cost_per_unit": 0}, policy=INGREDIENT_POLICY, partial=True)
        assert patch["cost_per_unit"] == Decimal("0")

    def test_negative_cost_rejected(self):
        with pytest.raises(ValidationError):
            validate_payload(model=Ingredient, payload={"cost_per_unit": -0.5}, policy=INGREDIENT_POLICY, partial=True)


class TestRecipeRules:
    def _payload(self, **overrides):
        payload = {
            "name": "Soup", "category": "Soups", "servings": 2,
            "ingredients": [{"ingredient_id": 1, "quantity": "0.25"}],
        }
        payload.update(overrides)
        return payload

    def test_valid(self):
        patch = validate_payload(model=Recipe, payload=self._payload(), policy=RECIPE_POLICY, partial=False)
        assert patch["ingredients"] == [{"ingredient_id": 1, "quantity": "0.25"}]

    def test_servings_at_least_one(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_payload(model=Recipe, payload=self._payload(servings=0), policy=RECIPE_POLICY, partial=False)
        assert _fields(exc_info) == ["servings"]

    def test_needs_an_ingredient(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_payload(model=Recipe, payload=self._payload(ingredients=[]), policy=RECIPE_POLICY, partial=False)
        assert _fields(exc_info) == ["ingredients"]

    def test_ingredients_must_be_a_list(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_payload(model=Recipe, payload={"ingredients": {"a": 1}}, policy=RECIPE_POLICY, partial=True)
        assert exc_info.value.errors[0]["message"] == "ingredients must be a list"

    def test_line_errors_carry_their_position(self):
        lines = [
            {"ingredient_id": 1, "quantity": 1},
            {"ingredient_id": "x", "quantity": 0},
            {"quantity": "0.5"},
            "flour",
        ]
        with pytest.raises(ValidationError) as exc_info:
            validate_payload(model=Recipe, payload={"ingredients": lines}, policy=RECIPE_POLICY, partial=True)
        assert _fields(exc_info) == [
            "ingredients[1].ingredient_id",
            "ingredients[1].quantity",
            "ingredients[2].ingredient_id",
            "ingredients[3]",
        ]

    def test_fractional_quantity_allowed(self):
        lines = [{"ingredient_id": 3, "quantity": 0.125}]
        patch = validate_payload(model=Recipe, payload={"ingredients": lines}, policy=RECIPE_POLICY, partial=True)
        assert patch["ingredients"] == lines

    def test_quantity_that_rounds_to_zero_is_rejected(self):
        lines = [{"ingredient_id": 3, "quantity": "0.0004"}]
        with pytest.raises(ValidationError) as exc_info:
            validate_payload(model=Recipe, payload={"ingredients": lines}, policy=RECIPE_POLICY, partial=True)
        assert exc_info.value.errors == [{"field": "ingredients[0].quantity", "message": "quantity must be > 0"}]

    def test_smallest_stored_quantity_allowed(self):
        lines = [{"ingredient_id": 3, "quantity": "0.0005"}]
        validate_payload(model=Recipe, payload={"ingredients": lines}, policy=RECIPE_POLICY, partial=True)


class TestSaleRules:
    def _payload(self, **overrides):
        payload = {
            "total_amount": "7.00", "payment_method": "card", "cashier_id": "c1",
            "items": [{"product_id": 1, "quantity": 2, "price": "3.50", "total": "7.00"}],
        }
        payload.update(overrides)
        return payload

    def test_valid(self):
        patch = validate_payload(model=Sale, payload=self._payload(), policy=SALE_POLICY, partial=False)
        assert patch["total_amount"] == Decimal("7.00")

    def test_created_at_is_not_writable(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_payload(
                model=Sale, payload=self._payload(created_at="2026-01-01T00:00:00Z"),
                policy=SALE_POLICY, partial=False,
            )
        assert _fields(exc_info) == ["created_at"]

    def test_total_must_be_positive(self):
        with pytest.raises(ValidationError):
            validate_payload(model=Sale, payload=self._payload(total_amount=0), policy=SALE_POLICY, partial=False)

    def test_items_may_be_empty(self):
        patch = validate_payload(model=Sale, payload=self._payload(items=[]), policy=SALE_POLICY, partial=False)
        assert patch["items"] == []

    def test_item_quantity_must_be_whole(self):
        items = [{"product_id": 1, "quantity": 1.5, "price": "3.50", "total": "5.25"}]
        with pytest.raises(ValidationError) as exc_info:
            validate_payload(model=Sale, payload={"items": items}, policy=SALE_POLICY, partial=True)
        assert _fields(exc_info) == ["items[0].quantity"]

    def test_item_money_fields(self):
        items = [{"product_id": 1, "quantity": 1, "price": "-1"}]
        with pytest.raises(ValidationError) as exc_info:
            validate_payload(model=Sale, payload={"items": items}, policy=SALE_POLICY, partial=True)
        assert _fields(exc_info) == ["items[0].total", "items[0].price"]

    def test_total_that_rounds_to_zero_is_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_payload(model=Sale, payload={"total_amount": "0.004"}, policy=SALE_POLICY, partial=True)
        assert _fields(exc_info) == ["total_amount"]

    def test_item_price_rounds_before_sign_check(self):
        items = [{"product_id": 1, "quantity": 1, "price": "-0.004", "total": "0"}]
        validate_payload(model=Sale, payload={"items": items}, policy=SALE_POLICY, partial=True)


class TestOperationalCostRules:
    def _payload(self, **overrides):
        payload = {
            "type": "rent", "description": "March rent", "amount": "1500",
            "date": "2026-03-01T00:00:00Z", "category": "Premises",
        }
        payload.update(overrides)
        return payload

    def test_valid_with_iso_date(self):
        patch = validate_payload(
            model=OperationalCost, payload=self._payload(date="2026-03-01T02:00:00+02:00"),
            policy=OPERATIONAL_COST_POLICY, partial=False,
        )
        assert patch["date"] == datetime(2026, 3, 1, 0, 0)
        assert patch["amount"] == Decimal("1500")

    def test_bad_date(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_payload(
                model=OperationalCost, payload=self._payload(date="first of march"),
                policy=OPERATIONAL_COST_POLICY, partial=False,
            )
        assert _fields(exc_info) == ["date"]

    def test_frequency_values(self):
        for frequency in ("daily", "weekly", "monthly"):
            validate_payload(
                model=OperationalCost, payload={"frequency": frequency},
                policy=OPERATIONAL_COST_POLICY, partial=True,
            )
        with pytest.raises(ValidationError) as exc_info:
            validate_payload(
                model=OperationalCost, payload={"frequency": "yearly"},
                policy=OPERATIONAL_COST_POLICY, partial=True,
            )
        assert _fields(exc_info) == ["frequency"]

    def test_amount_must_be_positive(self):
        with pytest.raises(ValidationError):
            validate_payload(
                model=OperationalCost, payload={"amount": 0},
                policy=OPERATIONAL_COST_POLICY, partial=True,
            )

    def test_amount_that_rounds_to_zero_is_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_payload(
                model=OperationalCost, payload={"amount": "0.001"},
                policy=OPERATIONAL_COST_POLICY, partial=True,
            )
        assert _fields(exc_info) == ["amount"]
