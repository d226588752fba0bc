"""
Tests unitaires pour le service produits / inventaire :
création, transferts, ajustements et dépenses d'achat automatiques.
"""

import uuid
from unittest.mock import MagicMock, patch

import pytest

from app.models.product import Product
from app.models.supplier import Supplier
from app.schemas.common import FieldUpdate
from app.schemas.product import InventoryAdjustment, ProductCreate, ProductUpdate, StockTransfer
from app.services import finance_service, product_service


def make_product(**kwargs):
    return Product(
        id=kwargs.get("id", uuid.uuid4()),
        name=kwargs.get("name", "Oil Filter"),
        purchase_price=kwargs.get("purchase_price", 6.0),
        sale_price=kwargs.get("sale_price", 10.0),
        warehouse_stock=kwargs.get("warehouse_stock", 10),
        shop_stock=kwargs.get("shop_stock", 4),
        low_stock_threshold=5,
    )


def make_db(*objects):
    index = {(type(o), o.id): o for o in objects}
    db = MagicMock()
    db.get.side_effect = lambda model, key: index.get((model, key))
    return db


# ============================================================
# create_product
# ============================================================

def test_create_product_fournisseur_introuvable():
    db = make_db()
    data = ProductCreate(name="Brake Pads", purchase_price=20, sale_price=35, supplier_id=uuid.uuid4())
    with pytest.raises(ValueError) as exc:
        product_service.create_product(db, data)
    assert "introuvable" in str(exc.value).lower()
    db.add.assert_not_called()


@patch("app.services.product_service.finance_service.book_record")
def test_create_product_stock_initial_genere_un_achat(mock_book):
    supplier = Supplier(id=uuid.uuid4(), name="AutoParts Inc.")
    db = make_db(supplier)
    data = ProductCreate(
        name="Brake Pads", purchase_price=20, sale_price=35,
        warehouse_stock=3, shop_stock=2, supplier_id=supplier.id,
    )

    product_service.create_product(db, data)

    mock_book.assert_called_once()
    args, kwargs = mock_book.call_args
    assert args[1] == finance_service.INVENTORY_PURCHASES
    assert kwargs["amount"] == 100
    db.commit.assert_called_once()


@patch("app.services.product_service.finance_service.book_record")
def test_create_product_sans_stock_aucun_achat(mock_book):
    supplier = Supplier(id=uuid.uuid4(), name="AutoParts Inc.")
    db = make_db(supplier)
    data = ProductCreate(name="Brake Pads", purchase_price=20, sale_price=35, supplier_id=supplier.id)

    product_service.create_product(db, data)
    mock_book.assert_not_called()


def test_product_create_prix_negatif_rejete():
    with pytest.raises(ValueError):
        ProductCreate(name="X", purchase_price=-1, sale_price=5, supplier_id=uuid.uuid4())


# ============================================================
# update_product / update_product_field
# ============================================================

@patch("app.services.product_service.finance_service.book_record")
def test_update_product_hausse_de_stock_genere_un_achat(mock_book):
    product = make_product(warehouse_stock=10)
    db = make_db(product)

    product_service.update_product(db, product.id, ProductUpdate(warehouse_stock=15))

    assert product.warehouse_stock == 15
    assert mock_book.call_args.kwargs["amount"] == 30.0


@patch("app.services.product_service.finance_service.book_record")
def test_update_product_baisse_de_stock_sans_achat(mock_book):
    product = make_product(shop_stock=4)
    db = make_db(product)

    product_service.update_product(db, product.id, ProductUpdate(shop_stock=1))

    assert product.shop_stock == 1
    mock_book.assert_not_called()


def test_update_product_introuvable():
    assert product_service.update_product(make_db(), uuid.uuid4(), ProductUpdate(name="X")) is None


def test_update_product_field_champ_inconnu():
    product = make_product()
    with pytest.raises(ValueError) as exc:
        product_service.update_product_field(make_db(product), product.id, FieldUpdate(field="id", value="x"))
    assert "non modifiable" in str(exc.value)


def test_update_product_field_valeur_invalide():
    product = make_product()
    with pytest.raises(ValueError) as exc:
        product_service.update_product_field(
            make_db(product), product.id, FieldUpdate(field="sale_price", value=-4)
        )
    assert "sale_price" in str(exc.value)


def test_update_product_field_modifie_le_champ():
    product = make_product()
    product_service.update_product_field(make_db(product), product.id, FieldUpdate(field="name", value="Air Filter"))
    assert product.name == "Air Filter"


# ============================================================
# transfer_stock
# ============================================================

def test_transfer_stock_deplace_les_unites():
    product = make_product(warehouse_stock=10, shop_stock=4)
    db = make_db(product)

    product_service.transfer_stock(db, product.id, StockTransfer(quantity=6, from_location="warehouse", to_location="shop"))

    assert product.warehouse_stock == 4
    assert product.shop_stock == 10


def test_transfer_stock_insuffisant():
    product = make_product(shop_stock=2)
    db = make_db(product)
    with pytest.raises(ValueError) as exc:
        product_service.transfer_stock(db, product.id, StockTransfer(quantity=3, from_location="shop", to_location="warehouse"))
    assert "insuffisant" in str(exc.value).lower()
    assert product.shop_stock == 2
    db.commit.assert_not_called()


def test_stock_transfer_meme_emplacement_rejete():
    with pytest.raises(ValueError):
        StockTransfer(quantity=1, from_location="shop", to_location="shop")


def test_stock_transfer_quantite_nulle_rejetee():
    with pytest.raises(ValueError):
        StockTransfer(quantity=0, from_location="shop", to_location="warehouse")


# ============================================================
# adjust_inventory
# ============================================================

@patch("app.services.product_service.finance_service.book_record")
def test_adjust_inventory_stock_jamais_negatif(mock_book):
    product = make_product(warehouse_stock=3, shop_stock=4)
    db = make_db(product)

    result = product_service.adjust_inventory(db, product.id, InventoryAdjustment(
        warehouse_adjustment=-5, shop_adjustment=0, reason="Casse", is_expense=False,
    ))

    assert product.warehouse_stock == 0
    assert result.warehouse_adjustment == -3
    assert result.total_adjustment == -3
    args, kwargs = mock_book.call_args
    assert args[1] == finance_service.INVENTORY_ADJUSTMENTS
    assert kwargs["amount"] == 18.0


@patch("app.services.product_service.finance_service.book_record")
def test_adjust_inventory_achat_sur_hausse_nette(mock_book):
    product = make_product(warehouse_stock=3, shop_stock=4)
    db = make_db(product)

    product_service.adjust_inventory(db, product.id, InventoryAdjustment(
        warehouse_adjustment=5, shop_adjustment=-1, reason="Livraison", is_expense=True,
    ))

    args, kwargs = mock_book.call_args
    assert args[1] == finance_service.INVENTORY_PURCHASES
    assert kwargs["amount"] == 24.0


@patch("app.services.product_service.finance_service.book_record")
def test_adjust_inventory_hausse_sans_depense(mock_book):
    product = make_product()
    product_service.adjust_inventory(make_db(product), product.id, InventoryAdjustment(
        warehouse_adjustment=2, shop_adjustment=0, reason="Recomptage", is_expense=False,
    ))
    mock_book.assert_not_called()


def test_adjust_inventory_ajustements_nuls():
    product = make_product()
    with pytest.raises(ValueError):
        product_service.adjust_inventory(make_db(product), product.id, InventoryAdjustment(
            warehouse_adjustment=0, shop_adjustment=0, reason="Rien",
        ))


# ============================================================
# delete_product
# ============================================================

def test_delete_product_utilise_dans_une_maintenance():
    product = make_product()
    db = make_db(product)
    db.execute.return_value.scalar.return_value = 12
    with pytest.raises(ValueError):
        product_service.delete_product(db, product.id)
    db.delete.assert_not_called()


def test_delete_product_ok():
    product = make_product()
    db = make_db(product)
    db.execute.return_value.scalar.return_value = None
    assert product_service.delete_product(db, product.id) is True
    db.delete.assert_called_once_with(product)
