"""
Tests unitaires pour le service financier :
catégories système, synthèse par période et exports CSV.
"""

import csv
import io
import uuid
from datetime import date
from unittest.mock import MagicMock

import pytest

from app.models.employee import Employee
from app.models.finance import FinanceCategory, FinanceRecord
from app.schemas.finance import FinanceCategoryCreate, FinanceCategoryUpdate, FinanceRecordCreate
from app.services import finance_service


def make_category(name="Maintenance Payments", type="income"):
    return FinanceCategory(id=uuid.uuid4(), name=name, type=type, is_default=True)


def make_record(category, amount, on_date, **kwargs):
    return FinanceRecord(
        id=uuid.uuid4(),
        category_id=category.id,
        amount=amount,
        description=kwargs.get("description", "Écriture"),
        date=on_date,
        payment_method=kwargs.get("payment_method"),
    )


# ============================================================
# Catégories système et book_record
# ============================================================

def test_get_or_create_category_existante():
    category = make_category()
    db = MagicMock()
    db.execute.return_value.scalars.return_value.first.return_value = category

    result = finance_service.get_or_create_category(db, "Maintenance Payments", "income")

    assert result is category
    db.add.assert_not_called()


def test_create_category_doublon_refuse():
    """Une catégorie utilisateur ne peut pas dupliquer une catégorie système."""
    db = MagicMock()
    db.execute.return_value.scalars.return_value.first.return_value = make_category()

    with pytest.raises(ValueError) as exc:
        finance_service.create_category(db, FinanceCategoryCreate(name="Maintenance Payments", type="income"))

    assert "existe déjà" in str(exc.value)
    db.add.assert_not_called()
    db.commit.assert_not_called()


def test_create_category_meme_nom_autre_type():
    db = MagicMock()
    db.execute.return_value.scalars.return_value.first.return_value = None

    finance_service.create_category(db, FinanceCategoryCreate(name="Maintenance Payments", type="expense"))

    category = db.add.call_args_list[0][0][0]
    assert category.type == "expense"
    db.commit.assert_called_once()


def test_update_category_renommage_en_doublon():
    category = make_category(name="Rent", type="expense")
    db = MagicMock()
    db.get.return_value = category
    db.execute.return_value.scalars.return_value.first.return_value = make_category(name="Utilities", type="expense")

    with pytest.raises(ValueError):
        finance_service.update_category(db, category.id, FinanceCategoryUpdate(name="Utilities"))

    assert category.name == "Rent"
    db.commit.assert_not_called()


def test_book_record_premiere_categorie_si_plusieurs():
    """Des doublons hérités en base ne bloquent pas les écritures automatiques."""
    first = make_category()
    db = MagicMock()
    db.execute.return_value.scalars.return_value.first.return_value = first

    record = finance_service.book_record(
        db,
        finance_service.MAINTENANCE_PAYMENTS,
        amount=80,
        description="Paiement maintenance",
        related_entity_type="maintenance",
        related_entity_id=uuid.uuid4(),
    )

    assert record.category_id == first.id


def test_book_record_cree_la_categorie_si_absente():
    db = MagicMock()
    db.execute.return_value.scalars.return_value.first.return_value = None

    record = finance_service.book_record(
        db,
        finance_service.EMPLOYEE_SALARIES,
        amount=2500.456,
        description="Salaire Alice",
        related_entity_type="salary",
        related_entity_id=uuid.UUID(int=7),
        payment_method="bank_transfer",
        on_date=date(2024, 3, 31),
    )

    category = db.add.call_args_list[0][0][0]
    assert isinstance(category, FinanceCategory)
    assert category.name == "Employee Salaries"
    assert category.type == "expense"
    assert category.is_default is True
    assert record.amount == 2500.46
    assert record.related_entity_id == str(uuid.UUID(int=7))
    assert record.date == date(2024, 3, 31)
    db.commit.assert_not_called()


def test_create_record_categorie_introuvable():
    db = MagicMock()
    db.get.return_value = None
    data = FinanceRecordCreate(
        category_id=uuid.uuid4(), amount=10, description="Divers", date=date(2024, 1, 1),
    )
    with pytest.raises(ValueError) as exc:
        finance_service.create_record(db, data)
    assert "introuvable" in str(exc.value)


def test_delete_category_utilisee():
    category = make_category()
    db = MagicMock()
    db.get.return_value = category
    db.execute.return_value.scalar.return_value = uuid.uuid4()

    with pytest.raises(ValueError):
        finance_service.delete_category(db, category.id)
    db.delete.assert_not_called()


def test_finance_record_montant_negatif_rejete():
    with pytest.raises(ValueError):
        FinanceRecordCreate(category_id=uuid.uuid4(), amount=-5, description="X", date=date(2024, 1, 1))


# ============================================================
# Synthèse
# ============================================================

def test_financial_summary_totaux_et_serie_triee():
    income = make_category("Maintenance Payments", "income")
    expense = make_category("Inventory Purchases", "expense")
    db = MagicMock()
    db.execute.return_value.all.return_value = [
        (make_record(income, 100.0, date(2024, 3, 10)), income),
        (make_record(expense, 40.0, date(2024, 1, 5)), expense),
        (make_record(income, 50.0, date(2024, 1, 20)), income),
    ]

    summary = finance_service.financial_summary(db, date(2024, 1, 1), date(2024, 12, 31), "month")

    assert summary.total_income == 150.0
    assert summary.total_expense == 40.0
    assert summary.net_balance == 110.0
    assert summary.income_by_category == {"Maintenance Payments": 150.0}
    assert summary.expense_by_category == {"Inventory Purchases": 40.0}
    assert [p.period for p in summary.time_series] == ["2024-01", "2024-03"]
    assert summary.time_series[0].balance == 10.0


def test_financial_summary_granularite_invalide():
    with pytest.raises(ValueError):
        finance_service.financial_summary(MagicMock(), date(2024, 1, 1), granularity="decade")


# ============================================================
# Exports CSV
# ============================================================

def test_export_records_csv_bom_et_separateur():
    income = make_category()
    db = MagicMock()
    db.execute.return_value.all.return_value = [
        (make_record(income, 80.0, date(2024, 5, 2), description="Paiement maintenance", payment_method="cash"), income),
    ]

    content = finance_service.export_records_csv(db)

    assert content.startswith("\ufeff")
    rows = list(csv.reader(io.StringIO(content.lstrip("\ufeff")), delimiter=";"))
    assert rows[0][0] == "date"
    assert rows[1][:4] == ["2024-05-02", "income", "Maintenance Payments", "80.00"]
    assert rows[1][5] == "cash"


def test_export_employees_csv():
    db = MagicMock()
    db.execute.return_value.scalars.return_value.all.return_value = [
        Employee(name="Alice", position="Mechanic", hire_date=date(2022, 4, 1), base_salary=2500, is_active=True),
    ]

    content = finance_service.export_employees_csv(db)

    rows = list(csv.reader(io.StringIO(content.lstrip("\ufeff")), delimiter=";"))
    assert rows[1] == ["Alice", "Mechanic", "2022-04-01", "", "", "2500.00", "yes"]
