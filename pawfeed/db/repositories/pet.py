"""Pet repository."""

from typing import Optional

from sqlmodel import Session, select

from pawfeed.models.pet import Pet


class PetRepository:
    """Repository for Pet database operations."""

    def __init__(self, session: Session):
        self.session = session

    def create(self, pet: Pet) -> Pet:
        self.session.add(pet)
        self.session.commit()
        self.session.refresh(pet)
        return pet

    def get_by_id(self, pet_id: int) -> Optional[Pet]:
        return self.session.get(Pet, pet_id)

    def get_all_by_feeder(self, feeder_id: str) -> list[Pet]:
        statement = select(Pet).where(Pet.feeder_id == feeder_id).order_by(Pet.id)
        return list(self.session.exec(statement).all())

    def lock_for_update(self, pet_id: int) -> Optional[Pet]:
        """Load the pet with a row lock held until the next commit/rollback.

        Serialises portion recalculations for the same pet.  Backends
        without row locks (SQLite) ignore ``FOR UPDATE``.
        """
        statement = select(Pet).where(Pet.id == pet_id).with_for_update()
        return self.session.exec(statement).first()

    def update(self, pet: Pet) -> Pet:
        self.session.add(pet)
        self.session.commit()
        self.session.refresh(pet)
        return pet

    def delete(self, pet_id: int) -> bool:
        pet = self.get_by_id(pet_id)
        if pet:
            self.session.delete(pet)
            self.session.commit()
            return True
        return False
