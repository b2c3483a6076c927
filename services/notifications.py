import logging

from services.checklist import CHECKLIST_BY_CODE, CNSS_HISTORY, physical_items

logger = logging.getLogger(__name__)


def _fmt(d):
    return d.strftime("%d/%m/%Y") if d else "-"


class NotificationService:
    """
    Transactional emails of the back-office.

    Every method returns True/False from the mailer; none of them raise, so a
    failed send never undoes the state change it is attached to.
    """

    def __init__(self, mailer, backoffice_email=None, hr_alert_email=None, frontend_url=None):
        self.mailer = mailer
        self.backoffice_email = backoffice_email
        self.hr_alert_email = hr_alert_email
        self.frontend_url = (frontend_url or "").rstrip("/")

    # -------------------------
    # Visa dossier
    # -------------------------
    def dossier_created(self, employee, dossier) -> bool:
        physical = "\n".join(f"  - {item.label}" for item in physical_items())
        cnss = CHECKLIST_BY_CODE[CNSS_HISTORY].label
        body = (
            f"Bonjour {employee.full_name},\n\n"
            f"Votre dossier de visa n°{dossier.id} ({dossier.motif}) a été créé pour un "
            f"voyage du {_fmt(dossier.departure_date)} au {_fmt(dossier.return_date)}.\n\n"
            "Merci de remettre au service RH les éléments suivants :\n"
            f"{physical}\n\n"
            f"Merci également de nous envoyer par email votre {cnss}.\n\n"
            "Cordialement,\n"
            "Service RH\n"
        )
        return self.mailer.send(employee.email, f"Dossier visa n°{dossier.id} : documents requis", body)

    def insurance_request(self, employee, dossier) -> bool:
        body = (
            "Bonjour,\n\n"
            f"Merci de fournir une assurance voyage pour {employee.full_name} "
            f"(matricule {employee.matricule}), du {_fmt(dossier.departure_date)} "
            f"au {_fmt(dossier.return_date)}.\n"
            f"Motif : {dossier.motif}\n\n"
            "Cordialement,\n"
            "Service RH\n"
        )
        return self.mailer.send(self.backoffice_email, f"Demande d'assurance voyage - {employee.full_name}", body)

    def ticket_request(self, employee, dossier) -> bool:
        body = (
            "Bonjour,\n\n"
            f"Merci de fournir le billet d'avion pour {employee.full_name} "
            f"(matricule {employee.matricule}) : départ le {_fmt(dossier.departure_date)}, "
            f"retour le {_fmt(dossier.return_date)}.\n"
            f"Motif : {dossier.motif}\n\n"
            "Cordialement,\n"
            "Service RH\n"
        )
        return self.mailer.send(self.backoffice_email, f"Demande de billet d'avion - {employee.full_name}", body)

    # -------------------------
    # Contracts
    # -------------------------
    def contract_end_alert(self, employee) -> bool:
        body = (
            "Bonjour,\n\n"
            f"Le contrat de {employee.full_name} (matricule {employee.matricule}, "
            f"{employee.contract_type}, {employee.position}) arrive à échéance le "
            f"{_fmt(employee.contract_end_date)}.\n"
            "Merci de prévoir son renouvellement ou sa clôture.\n\n"
            "RH Manager\n"
        )
        return self.mailer.send(self.hr_alert_email, f"Fin de contrat dans un mois - {employee.full_name}", body)

    # -------------------------
    # Accounts & payroll
    # -------------------------
    def password_reset(self, email, token) -> bool:
        link = f"{self.frontend_url}/reset-password?token={token}"
        body = (
            "Bonjour,\n\n"
            "Une réinitialisation de mot de passe a été demandée pour votre compte.\n"
            f"Utilisez ce lien pour choisir un nouveau mot de passe :\n{link}\n\n"
            "Si vous n'êtes pas à l'origine de cette demande, ignorez cet email.\n"
        )
        return self.mailer.send(email, "Réinitialisation de votre mot de passe", body)

    def payslip(self, employee, period, filename, content) -> bool:
        body = (
            f"Bonjour {employee.full_name},\n\n"
            f"Veuillez trouver ci-joint votre fiche de paie de {period}.\n\n"
            "Cordialement,\n"
            "Service RH\n"
        )
        return self.mailer.send(
            employee.email,
            f"Fiche de paie {period}",
            body,
            attachments=[(filename, content)],
        )
