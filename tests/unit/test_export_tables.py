"""Unit tests for the per-entity export tables."""

from __future__ import annotations

from datetime import date

import pytest

from talabahub.export.domains import (
    EXPORT_TABLES,
    blog_post_row,
    course_row,
    discount_row,
    get_export_table,
    job_row,
    user_row,
)


class TestRowBuilders:
    def test_job_row(self):
        row = job_row({
            "title": "Backend dasturchi",
            "company": {"name": "Uzum"},
            "location": "Toshkent",
            "jobType": "full_time",
            "isActive": True,
            "viewCount": 15,
            "createdAt": "2024-01-15T09:30:00.000Z",
        })
        assert row == {
            "Sarlavha": "Backend dasturchi",
            "Kompaniya": "Uzum",
            "Joylashuv": "Toshkent",
            "Ish turi": "full_time",
            "Maosh": "Kelishiladi",
            "Holat": "Faol",
            "Ko'rishlar": 15,
            "Yaratilgan": "15/01/2024",
        }

    def test_course_defaults(self):
        row = course_row({"title": "Python", "isActive": False})
        assert row["Narx"] == "Bepul"
        assert row["Holat"] == "Nofaol"
        assert row["Hamkor"] == ""
        assert row["O'quvchilar"] == 0
        assert row["Yaratilgan"] == ""

    def test_percentage_discount(self):
        row = discount_row({"title": "Kofe", "discountType": "percentage", "discountValue": 20.0})
        assert row["Chegirma"] == "20%"

    def test_fixed_discount(self):
        row = discount_row({"title": "Kino", "discountType": "fixed", "discountValue": 15000})
        assert row["Chegirma"] == "15000 so'm"

    def test_user_row(self):
        row = user_row({
            "firstName": "Aziza",
            "lastName": "Karimova",
            "email": "aziza@example.uz",
            "university": {"nameUz": "TATU"},
            "role": "student",
            "isEmailVerified": False,
        })
        assert row["Ism"] == "Aziza Karimova"
        assert row["Universitet"] == "TATU"
        assert row["Tasdiqlangan"] == "Yo'q"
        assert row["Telefon"] == ""

    def test_blog_post_row(self):
        row = blog_post_row({
            "title": "Maslahatlar",
            "author": {"firstName": "Bek"},
            "tags": ["ta'lim", "karyera"],
            "isPublished": False,
        })
        assert row["Muallif"] == "Bek"
        assert row["Teglar"] == "ta'lim, karyera"
        assert row["Holat"] == "Qoralama"

    @pytest.mark.parametrize("company", ["Acme", None, 42])
    def test_job_row_company_not_an_object(self, company):
        assert job_row({"title": "Dev", "company": company})["Kompaniya"] == ""

    def test_user_row_university_as_string(self):
        row = user_row({"firstName": "Aziza", "university": "TATU"})
        assert row["Universitet"] == ""
        assert row["Ism"] == "Aziza"

    def test_blog_post_author_as_string(self):
        assert blog_post_row({"title": "X", "author": "Bek"})["Muallif"] == ""


class TestExportTable:
    def test_all_entities_registered(self):
        assert set(EXPORT_TABLES) == {
            "jobs", "events", "courses", "users", "discounts",
            "companies", "brands", "categories", "universities", "blog-posts",
        }

    def test_headers_match_row_keys(self):
        for table in EXPORT_TABLES.values():
            assert tuple(table.build_row({})) == table.headers

    def test_unknown_entity(self):
        with pytest.raises(KeyError):
            get_export_table("invoices")

    def test_filename(self):
        assert get_export_table("blog-posts").filename(date(2024, 3, 9)) == "blog-posts-2024-03-09.csv"

    def test_to_csv_quotes_comma_values(self):
        csv_text = get_export_table("categories").to_csv([
            {"name": "Ovqat, ichimlik", "slug": "food", "type": "discount", "isActive": True},
        ])
        header, row = csv_text.split("\n")
        assert header == "Nom,Slug,Turi,Holat,Yaratilgan"
        assert row == '"Ovqat, ichimlik",food,discount,Faol,'

    def test_empty_records(self):
        assert get_export_table("jobs").to_csv([]) == ""
