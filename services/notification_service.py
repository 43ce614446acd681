import logging
import smtplib
from html import escape
from email.message import EmailMessage

logger = logging.getLogger(__name__)


# No SMS gateway is integrated; an SMS "send" is a log record of the attempt.
def send_sms_alert(phone, text):
    logger.warning("[NOTIFICATION] SMS alert to %s: %s", phone, text)
    return True


class EmailSender:
    def __init__(self, host=None, port=587, user=None, password=None, from_email=None, timeout=10):
        self.host = host
        self.port = int(port or 587)
        self.user = user
        self.password = password
        self.from_email = from_email
        self.timeout = timeout
        if not self.is_configured():
            logger.warning("SMTP settings are not fully configured. Email sending will be disabled.")

    @classmethod
    def from_config(cls, config):
        return cls(
            host=config.get('SMTP_HOST'),
            port=config.get('SMTP_PORT', 587),
            user=config.get('SMTP_USER'),
            password=config.get('SMTP_PASS'),
            from_email=config.get('SMTP_FROM_EMAIL'),
        )

    def is_configured(self):
        return all([self.host, self.port, self.user, self.password, self.from_email])

    def send_email(self, to, subject, text, html=None):
        """Send one message. Returns (success, error_message)."""
        if not self.is_configured():
            logger.error("SMTP not configured, cannot send email to %s", to)
            return False, "SMTP service is not configured."

        msg = EmailMessage()
        msg['From'] = self.from_email
        msg['To'] = to
        msg['Subject'] = subject
        msg.set_content(text)
        if html:
            msg.add_alternative(html, subtype='html')

        try:
            if self.port == 465:
                with smtplib.SMTP_SSL(self.host, self.port, timeout=self.timeout) as server:
                    server.login(self.user, self.password)
                    server.send_message(msg)
            else:
                with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as server:
                    server.starttls()
                    server.login(self.user, self.password)
                    server.send_message(msg)
        except smtplib.SMTPResponseException as e:
            logger.error("Error sending email to %s: %s", to, e)
            if e.smtp_code in (550, 554):
                return False, f"SMTP Relay Error (Code {e.smtp_code}): {e.smtp_error!r}. Check 'From' address authorization."
            return False, str(e)
        except (smtplib.SMTPException, OSError) as e:
            logger.error("Error sending email to %s: %s", to, e)
            return False, f"SMTP Connection Error: {e}. Check host/port and network."

        logger.info("[NOTIFICATION] Email sent to %s: %s", to, subject)
        return True, None

    def send_welcome_email(self, to, display_name, temporary_password, role, login_url):
        subject = "Welcome to HealthWise Hub!"
        text = (
            f"Hello {display_name},\n\n"
            f"Welcome to HealthWise Hub! Your account as a {role} has been created.\n\n"
            "You can log in using:\n"
            f"Email: {to}\n"
            f"Temporary Password: {temporary_password}\n\n"
            f"Please log in at: {login_url}\n\n"
            "Upon your first login, you will be required to change your temporary password.\n\n"
            "Regards,\nThe HealthWise Hub Team\n"
        )
        safe_name, safe_role, safe_to = escape(display_name), escape(role), escape(to)
        safe_password, safe_url = escape(temporary_password), escape(login_url)
        html = (
            '<div style="font-family: Arial, sans-serif; line-height: 1.6;">'
            f"<h2>Hello {safe_name},</h2>"
            f"<p>Welcome to <strong>HealthWise Hub</strong>! Your account as a <strong>{safe_role}</strong> has been created.</p>"
            "<ul>"
            f"<li><strong>Email:</strong> {safe_to}</li>"
            f"<li><strong>Temporary Password:</strong> {safe_password}</li>"
            "</ul>"
            f'<p>Please log in at: <a href="{safe_url}">{safe_url}</a></p>'
            "<p><strong>Important:</strong> Upon your first login, you will be required to change your temporary password.</p>"
            "<p>Regards,<br>The HealthWise Hub Team</p>"
            "</div>"
        )
        return self.send_email(to, subject, text, html)

    def send_severe_symptom_alert(self, to, patient_name, symptom_description):
        subject = f"URGENT Health Alert for Patient: {patient_name}"
        text = (
            "Dear Emergency Contact,\n\n"
            f"This is an URGENT health alert regarding patient {patient_name}.\n\n"
            "They have recently reported symptoms described as:\n"
            f'"{symptom_description}"\n\n'
            f"Please check on {patient_name} immediately. Consider contacting their doctor "
            "or emergency medical services if necessary.\n\n"
            "This is an automated alert from the HealthWise Hub system.\n"
        )
        safe_name = escape(patient_name)
        html = (
            '<div style="font-family: Arial, sans-serif; line-height: 1.6; border: 2px solid #ef4444; padding: 20px;">'
            '<h2 style="color: #b91c1c;">URGENT Health Alert</h2>'
            "<p>Dear Emergency Contact,</p>"
            f"<p>This is an URGENT health alert regarding patient <strong>{safe_name}</strong>.</p>"
            "<p>They have recently reported symptoms described as:</p>"
            f"<blockquote>&quot;{escape(symptom_description)}&quot;</blockquote>"
            f"<p><strong>Please check on {safe_name} immediately.</strong></p>"
            "<p>This is an automated alert from the HealthWise Hub system.</p>"
            "</div>"
        )
        return self.send_email(to, subject, text, html)
