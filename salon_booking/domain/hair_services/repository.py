"""Hair service repository - Database operations for services, categories and add-ons"""

from typing import Optional

from sqlalchemy.orm import Session

from ...models import HairCategory, HairService, Schedule, ServiceAddOn


class HairServiceRepository:
    """Repository for the service catalog"""

    # Services

    @staticmethod
    def get_service_by_id(db: Session, service_id: int) -> Optional[HairService]:
        return db.query(HairService).filter(HairService.id == service_id).first()

    @staticmethod
    def get_service_by_title(db: Session, title: str, category: str) -> Optional[HairService]:
        return db.query(HairService).filter(HairService.title == title, HairService.category == category).first()

    @staticmethod
    def get_all_services(db: Session) -> list[HairService]:
        return db.query(HairService).order_by(HairService.category, HairService.title).all()

    @staticmethod
    def get_services_in_category(db: Session, category: str) -> list[HairService]:
        return db.query(HairService).filter(HairService.category == category).all()

    @staticmethod
    def delete_services_in_category(db: Session, category: str) -> int:
        return db.query(HairService).filter(HairService.category == category).delete(synchronize_session=False)

    # Categories

    @staticmethod
    def get_category_by_id(db: Session, category_id: int) -> Optional[HairCategory]:
        return db.query(HairCategory).filter(HairCategory.id == category_id).first()

    @staticmethod
    def get_category_by_title(db: Session, title: str) -> Optional[HairCategory]:
        return db.query(HairCategory).filter(HairCategory.title == title).first()

    @staticmethod
    def get_all_categories(db: Session) -> list[HairCategory]:
        return db.query(HairCategory).order_by(HairCategory.title).all()

    # Add-ons

    @staticmethod
    def get_add_on_by_id(db: Session, add_on_id: int) -> Optional[ServiceAddOn]:
        return db.query(ServiceAddOn).filter(ServiceAddOn.id == add_on_id).first()

    @staticmethod
    def get_add_ons_for_service(db: Session, service_title: str) -> list[ServiceAddOn]:
        return db.query(ServiceAddOn).filter(ServiceAddOn.service == service_title).all()

    @staticmethod
    def get_all_add_ons(db: Session) -> list[ServiceAddOn]:
        return db.query(ServiceAddOn).order_by(ServiceAddOn.title).all()

    # Shared

    @staticmethod
    def get_schedule_by_id(db: Session, schedule_id: int) -> Optional[Schedule]:
        return db.query(Schedule).filter(Schedule.id == schedule_id).first()

    @staticmethod
    def create(db: Session, instance):
        db.add(instance)
        db.commit()
        db.refresh(instance)
        return instance

    @staticmethod
    def save(db: Session, instance):
        db.commit()
        db.refresh(instance)
        return instance

    @staticmethod
    def delete_by_id(db: Session, model, instance_id: int) -> int:
        deleted = db.query(model).filter(model.id == instance_id).delete(synchronize_session=False)
        db.commit()
        return deleted
