from maternacare.database import Base, engine
from maternacare.models import (
    person,
    patient,
    clinician,
    admin,
    appointment,
    vitals,
    prescription,
    supplement,
    allergy,
    laboratory_record,
)

print("Creating database tables...")
Base.metadata.create_all(bind=engine)
print("All tables created successfully!")
