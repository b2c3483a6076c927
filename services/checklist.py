"""Fixed, ordered checklist seeded into every visa dossier."""
from collections import namedtuple

from models.visa import MODE_PHYSICAL, MODE_UPLOAD

ChecklistItem = namedtuple("ChecklistItem", "code label mode")

PASSPORT_COPY = "PASSPORT_COPY"
CIN_COPY = "CIN_COPY"
ATTESTATION_TRAVAIL = "ATTESTATION_TRAVAIL"
INVITATION_PRISE_EN_CHARGE = "INVITATION_PRISE_EN_CHARGE"
ORDRE_MISSION = "ORDRE_MISSION"
PAYSLIPS = "PAYSLIPS"
BANK_STATEMENT = "BANK_STATEMENT"
CNSS_HISTORY = "CNSS_HISTORY"
TRAVEL_INSURANCE = "TRAVEL_INSURANCE"
FLIGHT_TICKET = "FLIGHT_TICKET"
ID_PHOTOS = "ID_PHOTOS"
ORIGINAL_PASSPORT = "ORIGINAL_PASSPORT"

VISA_CHECKLIST = (
    ChecklistItem(PASSPORT_COPY, "Copie du passeport", MODE_UPLOAD),
    ChecklistItem(CIN_COPY, "Copie de la CIN", MODE_UPLOAD),
    ChecklistItem(ATTESTATION_TRAVAIL, "Attestation de travail", MODE_UPLOAD),
    ChecklistItem(INVITATION_PRISE_EN_CHARGE, "Invitation / prise en charge", MODE_UPLOAD),
    ChecklistItem(ORDRE_MISSION, "Ordre de mission", MODE_UPLOAD),
    ChecklistItem(PAYSLIPS, "Trois dernières fiches de paie", MODE_UPLOAD),
    ChecklistItem(BANK_STATEMENT, "Relevé bancaire (3 derniers mois)", MODE_UPLOAD),
    ChecklistItem(CNSS_HISTORY, "Historique CNSS", MODE_UPLOAD),
    ChecklistItem(TRAVEL_INSURANCE, "Assurance voyage", MODE_UPLOAD),
    ChecklistItem(FLIGHT_TICKET, "Réservation du billet d'avion", MODE_UPLOAD),
    ChecklistItem(ID_PHOTOS, "Deux photos d'identité", MODE_PHYSICAL),
    ChecklistItem(ORIGINAL_PASSPORT, "Passeport original", MODE_PHYSICAL),
)

CHECKLIST_BY_CODE = {item.code: item for item in VISA_CHECKLIST}


def physical_items():
    return [item for item in VISA_CHECKLIST if item.mode == MODE_PHYSICAL]
