import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response, status
from sqlalchemy.orm import Session

from .. import schemas
from ..database import get_db
from ..services import PersonService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/person", tags=["Persons"])


@router.get("", response_model=List[schemas.Person])
def read_persons(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=1000),
    db: Session = Depends(get_db),
):
    """Get all persons ordered by id"""
    logger.info(f"Fetching persons with skip={skip}, limit={limit}")
    return PersonService(db).list(skip, limit)


@router.get("/{person_id}", response_model=schemas.Person)
def read_person(person_id: int, db: Session = Depends(get_db)):
    """Get person by ID"""
    logger.info(f"Fetching person with ID: {person_id}")
    person = PersonService(db).get(person_id)
    if person is None:
        logger.warning(f"Person with ID {person_id} not found")
        raise HTTPException(status_code=404, detail="Person not found")
    return person


@router.post("", response_model=schemas.Person, status_code=status.HTTP_201_CREATED)
def create_person(person: schemas.PersonCreate, request: Request, response: Response, db: Session = Depends(get_db)):
    """Create a new person"""
    logger.info(f"Creating person: {person.email}")
    created = PersonService(db).create(person)
    response.headers["Location"] = str(request.url_for("read_person", person_id=created.id))
    return created


@router.put("/{person_id}", status_code=status.HTTP_204_NO_CONTENT)
def update_person(person_id: int, person: schemas.PersonUpdate, db: Session = Depends(get_db)):
    """Replace a person's names and email"""
    logger.info(f"Updating person with ID: {person_id}")
    if not PersonService(db).update(person_id, person):
        logger.warning(f"Person with ID {person_id} not found")
        raise HTTPException(status_code=404, detail="Person not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/{person_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_person(person_id: int, db: Session = Depends(get_db)):
    """Delete a person"""
    logger.info(f"Deleting person with ID: {person_id}")
    if not PersonService(db).delete(person_id):
        logger.warning(f"Person with ID {person_id} not found")
        raise HTTPException(status_code=404, detail="Person not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
