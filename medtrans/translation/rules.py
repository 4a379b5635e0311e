"""
Built-in rule tables for the English to Arabic translation cascade.

The cascade runs in this order:
    1. CONSTRUCT_RULES  - multi-word clinical sentence shapes
    2. COMMON_PHRASES   - fixed clinical phrases
    3. GRAMMAR_WORD_RULES - function words and temporal adverbs
Each list is applied in declaration order. ``{M}`` marks a slot where an
inline dictionary marker may sit between words.
"""

from __future__ import annotations
from typing import List, Tuple
import re

from medtrans.core.rule_table import RuleTable, marker_tolerant, phrase_pattern

CONSTRUCT_PRIORITY = 100
PHRASE_PRIORITY = 200
GRAMMAR_WORD_PRIORITY = 300

_WORD = r"(\w+{M})"

CONSTRUCT_RULES: List[Tuple[str, str, str]] = [
    # Clinical sentence shapes
    (r"\b(?:take|taking){M}\s+" + _WORD + r"\s+(?:medication|medicine|drug|pill)\b{M}",
     r"تناول \g<1> (دواء)", "take X medication"),
    (r"\b(?:the{M}\s+)?patient{M}\s+(?:has|have|is\s+having){M}\s+" + _WORD,
     r"المريض يعاني من \g<1>", "patient has X"),
    (r"\b(?:diagnosis|diagnosed\s+with){M}\s+" + _WORD,
     r"تشخيص \g<1>", "diagnosis X"),
    (r"\bsymptoms?{M}\s+(?:include|includes){M}\s+([^.]+)",
     r"الأعراض تشمل \g<1>", "symptoms include X"),
    (r"\b(?:treatment|therapy){M}\s+(?:for|of){M}\s+" + _WORD,
     r"علاج \g<1>", "treatment for X"),
    (r"\b(?:blood{M}\s+pressure|bp){M}\s+(?:is|was){M}\s+(\d+/\d+)\b",
     r"ضغط الدم \g<1>", "blood pressure is N/M"),
    (r"\b(?:heart{M}\s+rate|pulse){M}\s+(?:is|was){M}\s+(\d+){M}\s+bpm\b",
     r"معدل ضربات القلب \g<1> نبضة في الدقيقة", "heart rate is N bpm"),
    (r"\b(?:temperature|temp){M}\s+(?:is|was){M}\s+(\d+(?:\.\d+)?)(?:\s*°?\s*[CF]\b)?",
     r"درجة الحرارة \g<1>", "temperature is N"),

    # Symptom and body-region phrases
    (r"\b(?:chest{M}\s+pain|chest{M}\s+discomfort)\b{M}", "ألم في الصدر", "chest pain"),
    (r"\b(?:abdominal{M}\s+pain|stomach{M}\s+pain)\b{M}", "ألم في البطن", "abdominal pain"),
    (r"\b(?:headache|head{M}\s+pain)\b{M}", "صداع", "headache"),
    (r"\b(?:back{M}\s+pain|backache)\b{M}", "ألم في الظهر", "back pain"),
    (r"\b(?:shortness{M}\s+of{M}\s+breath|difficulty{M}\s+breathing)\b{M}", "ضيق في التنفس", "shortness of breath"),
    (r"\b(?:nausea|feeling{M}\s+sick)\b{M}", "غثيان", "nausea"),
    (r"\b(?:vomiting|throwing{M}\s+up)\b{M}", "قيء", "vomiting"),
    (r"\b(?:diarrhea|loose{M}\s+stools)\b{M}", "إسهال", "diarrhea"),
    (r"\b(?:constipation|difficulty{M}\s+passing{M}\s+stools)\b{M}", "إمساك", "constipation"),
    (r"\b(?:fever|high{M}\s+temperature)\b{M}", "حمى", "fever"),
    (r"\b(?:cough|coughing)\b{M}", "سعال", "cough"),
    (r"\b(?:fatigue|tiredness|exhaustion)\b{M}", "إرهاق", "fatigue"),
    (r"\b(?:dizziness|feeling{M}\s+dizzy)\b{M}", "دوخة", "dizziness"),
    (r"\bswelling\b{M}", "تورم", "swelling"),
    (r"\b(?:rash|skin{M}\s+irritation)\b{M}", "طفح جلدي", "rash"),
]

COMMON_PHRASES: List[Tuple[str, str]] = [
    ("medical history", "التاريخ الطبي"),
    ("family history", "التاريخ العائلي"),
    ("physical examination", "الفحص الجسدي"),
    ("laboratory tests", "الفحوصات المخبرية"),
    ("blood pressure", "ضغط الدم"),
    ("blood test", "فحص الدم"),
    ("urine test", "فحص البول"),
    ("x-ray", "أشعة سينية"),
    ("CT scan", "أشعة مقطعية"),
    ("MRI scan", "رنين مغناطيسي"),
    ("ultrasound", "موجات فوق صوتية"),
    ("side effects", "الآثار الجانبية"),
    ("allergic reaction", "رد فعل تحسسي"),
    ("emergency room", "غرفة الطوارئ"),
    ("intensive care", "العناية المركزة"),
    ("chronic condition", "حالة مزمنة"),
    ("acute condition", "حالة حادة"),
    ("stable condition", "حالة مستقرة"),
    ("critical condition", "حالة حرجة"),
    ("vital signs", "العلامات الحيوية"),
    ("medical record", "السجل الطبي"),
    ("health insurance", "التأمين الصحي"),
    ("medical certificate", "شهادة طبية"),
    ("second opinion", "رأي ثاني"),
    ("follow-up", "متابعة"),
    ("prescription", "وصفة طبية"),
    ("medication", "دواء"),
    ("dosage", "الجرعة"),
    ("surgery", "جراحة"),
    ("operation", "عملية"),
    ("recovery", "الشفاء"),
    ("appointment", "موعد"),
    ("consultation", "استشارة"),
]

GRAMMAR_WORD_RULES: List[Tuple[str, str, str]] = [
    # Definite nouns
    (r"\bthe{M}\s+patient\b{M}", "المريض", "the patient"),
    (r"\bthe{M}\s+doctor\b{M}", "الطبيب", "the doctor"),
    (r"\bthe{M}\s+nurse\b{M}", "الممرضة", "the nurse"),
    (r"\bthe{M}\s+hospital\b{M}", "المستشفى", "the hospital"),
    (r"\bthe{M}\s+clinic\b{M}", "العيادة", "the clinic"),

    # Time expressions
    (r"\btoday\b{M}", "اليوم", "today"),
    (r"\byesterday\b{M}", "أمس", "yesterday"),
    (r"\btomorrow\b{M}", "غداً", "tomorrow"),
    (r"\bnow\b{M}", "الآن", "now"),
    (r"\blater\b{M}", "لاحقاً", "later"),
    (r"\bdaily\b{M}", "يومياً", "daily"),
    (r"\bweekly\b{M}", "أسبوعياً", "weekly"),

    # Copulas, auxiliaries and modals
    (r"\bis\b{M}", "هو/هي", "is"),
    (r"\bare\b{M}", "هم/هن", "are"),
    (r"\bwas\b{M}", "كان", "was"),
    (r"\bwere\b{M}", "كانوا", "were"),
    (r"\bhas\b{M}", "لديه", "has"),
    (r"\bhave\b{M}", "لديهم", "have"),
    (r"\bwill\b{M}", "سوف", "will"),
    (r"\bcan\b{M}", "يمكن", "can"),
    (r"\bshould\b{M}", "يجب", "should"),
    (r"\bmust\b{M}", "يجب", "must"),

    # Pronouns
    (r"\bhe\b{M}", "هو", "he"),
    (r"\bshe\b{M}", "هي", "she"),
    (r"\bthey\b{M}", "هم", "they"),
    (r"\bwe\b{M}", "نحن", "we"),

    # Conjunctions and prepositions
    (r"\band\b{M}", "و", "and"),
    (r"\bor\b{M}", "أو", "or"),
    (r"\bwith\b{M}", "مع", "with"),
    (r"\bwithout\b{M}", "بدون", "without"),
    (r"\bin\b{M}", "في", "in"),
    (r"\bon\b{M}", "على", "on"),
    (r"\bafter\b{M}", "بعد", "after"),
    (r"\bbefore\b{M}", "قبل", "before"),

    # Remaining articles carry no Arabic equivalent
    (r"\b(?:a|an|the)\b{M}\s*", "", "articles"),
]


def build_construct_table() -> RuleTable:
    definitions = [(marker_tolerant(p), r, d) for p, r, d in CONSTRUCT_RULES]
    return RuleTable.from_definitions("construct", definitions, CONSTRUCT_PRIORITY, re.IGNORECASE)


def build_phrase_table() -> RuleTable:
    definitions = [(phrase_pattern(p), t, p) for p, t in COMMON_PHRASES]
    return RuleTable.from_definitions("phrase", definitions, PHRASE_PRIORITY, re.IGNORECASE)


def build_grammar_word_table() -> RuleTable:
    definitions = [(marker_tolerant(p), r, d) for p, r, d in GRAMMAR_WORD_RULES]
    return RuleTable.from_definitions("grammar-word", definitions, GRAMMAR_WORD_PRIORITY, re.IGNORECASE)
