# api/attendance/late_reason_classifier.py

import re
import unicodedata
from typing import NamedTuple, Pattern, Tuple


class LateReason(NamedTuple):
    category: str
    score: int


OTHER = LateReason("Other", 50)

# Order matters: the first matching rule wins.
RULES: Tuple[Tuple[LateReason, Pattern], ...] = (
    (LateReason("Traffic", 95), re.compile(
        r"(trafic|traffic|atasc|embotell|congestion|choque|accident|crash|bloque|paraliz|desvio|detour)"
    )),
    (LateReason("Transport", 92), re.compile(
        r"(\bbus|micro|combi|colectivo|metro|tren|train|mototaxi|taxi|paradero|transporte|transport|vehicul|\bauto\b|\bcar\b)"
    )),
    (LateReason("Health", 92), re.compile(
        r"(salud|medic|doctor|cita|clinica|clinic|hospital|fiebre|fever|dolor|enferm|sick|farmaci|pharmac"
        r"|odont|dental|dentist|analisis|prueba|psicolog|terapia|therap)"
    )),
    (LateReason("Documents", 90), re.compile(
        r"(tramite|document|dni|reniec|notari|banco|bank|sunat|licencia|certific|constancia|registro|pago)"
    )),
    (LateReason("Permission", 88), re.compile(
        r"(permiso|autoriz|permission|authoriz)"
    )),
    (LateReason("Family", 88), re.compile(
        r"(hijo|hija|famil|mama|papa|abuel|esposa|esposo|pareja|colegi|escuela|school|jardin|guarderia"
        r"|daycare|velorio|funeral)"
    )),
)


def normalize(text: str) -> str:
    """Lower-case and strip diacritics (NFD, drop combining marks)."""
    decomposed = unicodedata.normalize("NFD", str(text or "").lower())
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def classify(text: str) -> LateReason:
    t = normalize(text)
    for reason, rx in RULES:
        if rx.search(t):
            return reason
    return OTHER
