from conftest import API, booking_payload

from salon_booking.models import HairCategory, HairService, ServiceAddOn

PNG = b"\x89PNG\r\n\x1a\nfake"


class TestServices:
    def test_add_service(self, client, as_admin, catalog):
        response = client.post(
            f"{API}/hair-service/service",
            json={"title": "Knotless", "price": 200, "category": "Braids", "duration": 5},
        )
        assert response.status_code == 201
        content = response.json()["content"]
        assert content["title"] == "Knotless"
        assert content["duration"] == 5

    def test_add_service_requires_fields(self, client, as_admin, catalog):
        response = client.post(f"{API}/hair-service/service", json={"title": "Knotless", "category": "Braids"})
        assert response.status_code == 400
        assert response.json()["content"] == "Hair service price is required"

    def test_add_service_to_unknown_category(self, client, as_admin, catalog):
        response = client.post(
            f"{API}/hair-service/service",
            json={"title": "Silk Press", "price": 90, "category": "Straightening", "duration": 2},
        )
        assert response.status_code == 404
        assert response.json()["content"] == "Category not found"

    def test_duplicate_in_category(self, client, as_admin, catalog):
        response = client.post(
            f"{API}/hair-service/service",
            json={"title": "Cornrows", "price": 70, "category": "Braids", "duration": 2},
        )
        assert response.json()["content"] == "Hair service already exists in this category"

    def test_rename_carries_add_ons(self, client, db, as_admin, catalog):
        service = db.query(HairService).filter_by(title="Cornrows").one()
        db.add(ServiceAddOn(title="Beads", price=10, duration=0.5, service="Cornrows"))
        db.commit()

        response = client.post(
            f"{API}/hair-service/update/service", json={"id": service.id, "title": "Feed-in Cornrows", "price": 75}
        )
        assert response.json()["content"]["price"] == 75

        db.expire_all()
        assert db.query(ServiceAddOn).one().service == "Feed-in Cornrows"

    def test_update_missing_service(self, client, as_admin):
        response = client.post(f"{API}/hair-service/update/service", json={"id": 99, "price": 10})
        assert response.status_code == 404
        assert response.json()["content"] == "Hair service was not found"

    def test_remove_service(self, client, db, as_admin, catalog):
        service = db.query(HairService).filter_by(title="Cornrows").one()
        response = client.post(f"{API}/hair-service/service/{service.id}")
        assert response.json() == {"isSuccess": True, "content": "deleted"}
        db.expire_all()
        assert db.query(HairService).count() == 2

    def test_grouped_by_category(self, client, catalog):
        content = client.get(f"{API}/hair-service").json()["content"]
        assert list(content) == ["Braids"]
        assert {s["title"] for s in content["Braids"]} == {"Box Braids", "Cornrows", "Micro Braids"}


class TestAvailableServices:
    def _titles(self, response):
        return {s["title"] for group in response.json()["content"].values() for s in group}

    def test_whole_day_fits_everything(self, client, catalog, schedule):
        response = client.post(f"{API}/hair-service/available", json={"scheduleId": schedule.id})
        assert self._titles(response) == {"Box Braids", "Cornrows", "Micro Braids"}

    def test_limited_by_run_from_start_time(self, client, catalog, schedule):
        response = client.post(
            f"{API}/hair-service/available", json={"scheduleId": schedule.id, "startTime": "10:00am"}
        )
        assert self._titles(response) == {"Box Braids", "Cornrows"}

    def test_limited_by_existing_booking(self, client, catalog, schedule):
        client.post(f"{API}/booking", json=booking_payload(schedule.id, startTime="12:00pm"))

        # 09:00-11:00 is all that is left before the booking
        response = client.post(
            f"{API}/hair-service/available", json={"scheduleId": schedule.id, "startTime": "09:00am"}
        )
        assert self._titles(response) == {"Cornrows"}

    def test_unknown_schedule(self, client, catalog):
        response = client.post(f"{API}/hair-service/available", json={"scheduleId": 404})
        assert response.status_code == 404


class TestCategories:
    def test_add_category_uploads_cover(self, client, storage, as_admin):
        response = client.post(
            f"{API}/hair-service/category",
            data={"title": "Locs"},
            files={"file": ("locs.png", PNG, "image/png")},
        )
        assert response.status_code == 201
        content = response.json()["content"]
        assert content["title"] == "Locs"
        assert content["driveId"] == "category-1"
        assert content["coverLink"] == "https://cdn.test/category-1"
        assert storage.files["category-1"] == (PNG, "image/png")

    def test_add_category_requires_file(self, client, as_admin):
        response = client.post(f"{API}/hair-service/category", data={"title": "Locs"})
        assert response.status_code == 400
        assert response.json()["content"] == "File is missing"

    def test_duplicate_category(self, client, as_admin, catalog):
        response = client.post(
            f"{API}/hair-service/category",
            data={"title": "Braids"},
            files={"file": ("b.png", PNG, "image/png")},
        )
        assert response.json()["content"] == "Category already exists"

    def test_rename_category_moves_services(self, client, db, storage, as_admin, catalog):
        response = client.post(
            f"{API}/hair-service/update/category",
            data={"id": str(catalog.id), "title": "Protective Styles"},
            files={"file": ("new.png", PNG, "image/png")},
        )
        content = response.json()["content"]
        assert content["title"] == "Protective Styles"
        assert content["driveId"] == "category-1"
        assert storage.deleted == ["category-0"]

        db.expire_all()
        assert {s.category for s in db.query(HairService)} == {"Protective Styles"}

    def test_update_category_requires_id(self, client, as_admin):
        response = client.post(f"{API}/hair-service/update/category", data={"title": "Locs"})
        assert response.json()["content"] == "Invalid request argument"

    def test_remove_category_with_services(self, client, db, storage, as_admin, catalog):
        response = client.post(f"{API}/hair-service/category/{catalog.id}")
        assert response.json()["content"] == "deleted"
        assert storage.deleted == ["category-0"]

        db.expire_all()
        assert db.query(HairCategory).count() == 0
        assert db.query(HairService).count() == 0

    def test_list_categories(self, client, catalog):
        content = client.get(f"{API}/hair-service/category").json()["content"]
        assert content[0]["coverLink"] == "https://cdn.test/category-0"


class TestAddOns:
    def test_add_and_list(self, client, as_admin):
        response = client.post(
            f"{API}/hair-service/add-on", json={"title": "Beads", "price": 10, "duration": 0.5, "service": "Cornrows"}
        )
        assert response.status_code == 201

        content = client.get(f"{API}/hair-service/add-on").json()["content"]
        assert content[0]["title"] == "Beads"

    def test_add_requires_duration(self, client, as_admin):
        response = client.post(f"{API}/hair-service/add-on", json={"title": "Beads", "price": 10})
        assert response.json()["content"] == "Add on duration is required"

    def test_update_and_remove(self, client, db, as_admin):
        add_on = ServiceAddOn(title="Wash", price=15, duration=1)
        db.add(add_on)
        db.commit()

        response = client.post(f"{API}/hair-service/update/add-on", json={"id": add_on.id, "price": 20})
        assert response.json()["content"]["price"] == 20

        client.post(f"{API}/hair-service/add-on/{add_on.id}")
        db.expire_all()
        assert db.query(ServiceAddOn).count() == 0

    def test_update_missing(self, client, as_admin):
        response = client.post(f"{API}/hair-service/update/add-on", json={"id": 7, "price": 20})
        assert response.json()["content"] == "Addon not found"
