from __future__ import annotations

from datetime import date, datetime, time

from barbershop.domain.entities.employee import Employee
from barbershop.domain.entities.service_catalog import Service

DAY_NAMES_ES = ["lunes", "martes", "miércoles", "jueves", "viernes", "sábado", "domingo"]
MONTH_NAMES_ES = [
    "enero",
    "febrero",
    "marzo",
    "abril",
    "mayo",
    "junio",
    "julio",
    "agosto",
    "septiembre",
    "octubre",
    "noviembre",
    "diciembre",
]

EXIT_HINT = 'Escribe "cancelar" en cualquier momento para salir del proceso.'

ANYTHING_ELSE = """🧑🏾‍🦲 ¿Le puedo servir en algo más?

Por favor responda con una de las siguientes opciones:

👉🏾 Si
👉🏾 No"""


def format_price(price: int) -> str:
    """25000 -> "25 mil pesos", 27500 -> "27,5 mil pesos"."""
    thousands = price / 1000
    if thousands == int(thousands):
        amount = f"{int(thousands):,}".replace(",", ".")
    else:
        amount = f"{thousands:g}".replace(".", ",")
    return f"{amount} mil pesos"


def format_time_12h(value: str | time) -> str:
    """"14:30" -> "2:30 PM"."""
    if isinstance(value, str):
        hours, minutes = (int(part) for part in value.split(":", 1))
    else:
        hours, minutes = value.hour, value.minute
    period = "PM" if hours >= 12 else "AM"
    return f"{hours % 12 or 12}:{minutes:02d} {period}"


def format_long_date(value: date | datetime) -> str:
    """"lunes, 19 de octubre de 2026"."""
    return f"{DAY_NAMES_ES[value.weekday()]}, {value.day} de {MONTH_NAMES_ES[value.month - 1]} de {value.year}"


class MessageTemplates:
    def __init__(self, business_name: str, business_address: str) -> None:
        self._business_name = business_name
        self._business_address = business_address

    def welcome(self) -> str:
        return f"""💈 Hola, te saluda {self._business_name}, es un gusto atenderte 💈

¿Necesitas información de...?

Por favor responda con una de las siguientes opciones:

1️⃣ Dónde estamos
2️⃣ Lista de precios
3️⃣ Agendar una cita
4️⃣ Cancelar una cita

{EXIT_HINT}"""

    def location(self) -> str:
        return f"🧑🏾‍🦲 Estamos ubicados en {self._business_address}\n\n{ANYTHING_ELSE}"

    def price_list(self, services: list[Service]) -> str:
        if not services:
            return "🧑🏾‍🦲 En este momento no tenemos servicios publicados."
        lines = ["🧑🏾‍🦲 Todos nuestros servicios incluyen como obsequio una mascarilla para puntos negros:", ""]
        for service in services:
            line = f"* {service.name} {format_price(service.price)}"
            if service.description:
                line += f" ({service.description})"
            lines.extend([line, ""])
        return "\n".join(lines).strip()

    def anything_else(self) -> str:
        return ANYTHING_ELSE

    def choose_barber(self, employees: list[Employee]) -> str:
        lines = [
            "🧑🏾‍🦲 ¿Con cual de nuestros profesionales desea su cita?",
            "",
            "🧑🏾‍🦲 Por favor envíeme de ésta lista el número que corresponde al profesional con el cual desea su cita",
            "",
        ]
        lines.extend(f"👉🏾 {index} {employee.name}" for index, employee in enumerate(employees, start=1))
        lines.extend(["", "En caso que no sea ninguno de los anteriores por favor responda Ninguno", "", EXIT_HINT])
        return "\n".join(lines)

    def no_barbers_available(self) -> str:
        return f"🧑🏾‍🦲 Lo siento, en este momento no hay profesionales disponibles para agendar.\n\n{ANYTHING_ELSE}"

    def ask_full_name(self) -> str:
        return f"🧑🏾‍🦲 ¿Podría indicarme su nombre completo por favor?\n\n{EXIT_HINT}"

    def invalid_name(self) -> str:
        return (
            "🧑🏾‍🦲 Por favor escriba su nombre y apellido (ej: Juan Pérez)\n\n"
            f"Intente de nuevo por favor\n\n{EXIT_HINT}"
        )

    def ask_date(self) -> str:
        return f"""🧑🏾‍🦲 ¿Para cuando desea su cita?

Por favor responda con una de las siguientes opciones:

👉🏾 Hoy
👉🏾 Mañana
👉🏾 Pasado mañana

{EXIT_HINT}"""

    def checking_schedule(self) -> str:
        return "🧑🏾‍🦲 Un momento por favor, voy a consultar la agenda..."

    def available_slots(self, labels: list[str] | tuple[str, ...]) -> str:
        lines = ["Tengo los siguientes turnos disponibles:", ""]
        lines.extend(f"👉🏾 {index}. {label}" for index, label in enumerate(labels, start=1))
        lines.extend(
            [
                "",
                "🧑🏾‍🦲 Por favor envíeme el número del turno que desea.",
                "",
                "Si no desea ninguno de los turnos disponibles envíeme la palabra Cancelar",
            ]
        )
        return "\n".join(lines)

    def no_slots(self) -> str:
        return (
            "🧑🏾‍🦲 Lo siento, no hay turnos disponibles para ese día.\n\n"
            f"Por favor elija otro día: Hoy, Mañana o Pasado mañana\n\n{EXIT_HINT}"
        )

    def slot_taken(self) -> str:
        return "🧑🏾‍🦲 Lo siento, ese horario ya ha sido ocupado por otro cliente."

    def appointment_confirmed(self, tracking_code: str, service: str, barber: str, day: str, hour: str) -> str:
        return f"""✅ *Su cita ha sido agendada exitosamente*

✂️ Servicio: {service}
👤 Barbero: {barber}
📅 Fecha: {day}
⏰ Hora: {hour}

━━━━━━━━━━━━━━━━
📋 *Código de cita:*

*{tracking_code}*
━━━━━━━━━━━━━━━━

🔖 _Guárdelo para cancelar su cita_

¡Le esperamos! 💈"""

    def ask_has_tracking_code(self) -> str:
        return f"""🧑🏾‍🦲 Para cancelar su cita necesito el código de radicado

¿Tiene con usted el código de su cita?

👉🏾 Sí
👉🏾 No

{EXIT_HINT}"""

    def ask_tracking_code(self) -> str:
        return (
            "🧑🏾‍🦲 Por favor envíeme el código de su cita\n\n"
            "_Puede copiarlo del mensaje de confirmación (ej: RAD-4K7M2P)_\n\n"
            f"{EXIT_HINT}"
        )

    def without_tracking_code(self) -> str:
        return "🧑🏾‍🦲 Lo siento, sin el código de radicado no es posible cancelar la cita."

    def tracking_code_not_found(self) -> str:
        return (
            "🧑🏾‍🦲 No encontré ninguna cita con ese código asociada a su número\n\n"
            f"Por favor verifique e intente nuevamente\n\n{EXIT_HINT}"
        )

    def confirm_cancellation(self, tracking_code: str, service: str, day: str, hour: str) -> str:
        return f"""⚠️ *¿Está seguro que desea cancelar esta cita?*

✂️ Servicio: {service}
📅 Fecha: {day}
⏰ Hora: {hour}
🔖 Código: {tracking_code}

Por favor responda:

👉🏾 Sí, cancelar
👉🏾 No, conservar

{EXIT_HINT}"""

    def appointment_cancelled(self) -> str:
        return (
            "✅ *Su cita ha sido cancelada exitosamente*\n\n"
            "🧑🏾‍🦲 Si desea agendar una nueva cita, puede escribirnos cuando guste"
        )

    def appointment_not_cancellable(self) -> str:
        return "🧑🏾‍🦲 Esta cita ya no se puede cancelar por este medio. Si necesita ayuda, comuníquese con la barbería."

    def goodbye(self) -> str:
        return (
            "🧑🏾‍🦲 Ha sido un placer servirle, espero que mi atención haya sido de su agrado, "
            "le deseo un feliz resto de día"
        )

    def invalid_option(self) -> str:
        return "🧑🏾‍🦲 Por favor lea con atención y responda correctamente\n\nIntente de nuevo por favor"

    def server_error(self) -> str:
        return "🧑🏾‍🦲 Lo siento, hubo un problema técnico. Por favor intente nuevamente en unos momentos."

    def process_cancelled(self) -> str:
        return "🧑🏾‍🦲 Proceso cancelado. Si necesita ayuda en el futuro, no dude en contactarnos."
