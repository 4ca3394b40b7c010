from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Literal, NamedTuple, Sequence

from .text import turkish_lower

NEGATIVE_PREFIX = "NOT_"
GENERAL_DOMAIN = "Genel Hukuk"

DocumentType = Literal[
    "law",
    "regulation",
    "decree",
    "circular",
    "court_decision",
    "interpretation",
    "guidance",
]


@dataclass(frozen=True)
class LegalDomain:
    name: str
    description: str
    examples: tuple[str, ...]
    embedding: tuple[float, ...] | None = None

    @property
    def positive_examples(self) -> tuple[str, ...]:
        return tuple(ex for ex in self.examples if not ex.startswith(NEGATIVE_PREFIX))

    @property
    def negative_terms(self) -> tuple[str, ...]:
        return tuple(
            turkish_lower(ex[len(NEGATIVE_PREFIX) :]).replace("_", " ")
            for ex in self.examples
            if ex.startswith(NEGATIVE_PREFIX)
        )

    def context_text(self) -> str:
        return f"{self.name}: {self.description}. Örnekler: {', '.join(self.positive_examples)}"

    def with_embedding(self, vector: Sequence[float]) -> LegalDomain:
        return replace(self, embedding=tuple(vector))


LEGAL_DOMAINS: tuple[LegalDomain, ...] = (
    LegalDomain(
        name="Medeni Hukuk",
        description="Aile hukuku, kişilik hakları ve medeni kanun ile ilgili konular",
        examples=(
            "boşanma",
            "evlilik",
            "miras",
            "tapu",
            "velayet",
            "vesayet",
            "nafaka",
            "mal rejimi",
            "aile birliği",
            "kişilik hakları",
            "miras paylaşımı",
            "düğün",
            "aile hukuku",
            "çocuk hakları",
            "soyadı değişikliği",
            "çocuğun soyadı",
            "çocuğun soyadını değiştirme",
            "soyadı değiştirme işlemleri",
            "boşanma sonrası",
            "boşanma sonrası konut",
            "evlilik birliği",
            "evlilik birliğinin hukuki",
            "miras hukuku",
            "miras hukukunda saklı",
            "saklı pay",
            "boşanma",
            "miras",
            "evlilik",
            "aile",
            "çocuk",
            "soyadı",
        ),
    ),
    LegalDomain(
        name="İş Hukuku",
        description=(
            "İşçi-işveren ilişkileri, çalışma hayatı, iş sözleşmeleri, işyeri haklarıyla ilgili konular. "
            "Kıdem tazminatı, ihbar tazminatı, işten çıkarma, çalışma koşulları, sendika hakları, "
            "iş kazaları, fazla mesai, izin hakları, işsizlik maaşı gibi konuları kapsar."
        ),
        examples=(
            "kıdem tazminatı",
            "işten çıkarma",
            "çalışma saatleri",
            "iş sözleşmesi",
            "ihbar tazminatı",
            "fazla mesai",
            "işsizlik maaşı",
            "sendika hakları",
            "iş kazası",
            "işçi hakları",
            "çalışma koşulları",
            "işyeri güvenliği",
            "emekli maaşı",
            "yıllık izin",
            "yıllık izin hakları",
            "çalışanların yıllık izin",
            "izin hakları",
            "izin günü",
            "mazeret izni",
            "doğum izni",
            "çalışanların hakları",
            "çalışan hakları",
            "işçi sağlığı",
            "iş güvenliği",
            "iş güvenliği mevzuatı",
            "sendika kurma",
            "sendika kurma sürecinde",
            "işveren yükümlülükleri",
            "iş yerinde sigorta",
            "işçi sigorta",
            "çalışma hayatı",
            "çalışma şartları",
            "işyeri koşulları",
            "çalışanların",
            "işçi",
            "işveren",
            "çalışma",
            "sendika",
            "NOT_KASKO",
            "NOT_SİGORTA_POLİÇESİ",
        ),
    ),
    LegalDomain(
        name="Ceza Hukuku",
        description=(
            "Kişisel suçlar ve cezalar - SADECE gerçek suçlar (hırsızlık, dolandırıcılık vb). "
            "İdari cezalar ve disiplin cezaları DEĞİL."
        ),
        examples=(
            "hırsızlık",
            "dolandırıcılık",
            "yaralama",
            "tehdit",
            "suç",
            "ceza",
            "hapis",
            "para cezası",
            "dava",
            "savcılık",
            "suç duyurusu",
            "ceza indirimi",
            "hırsızlık suçu",
            "dolandırıcılık dava",
            "suç duyuru",
            "NOT_İDARİ",
            "NOT_DİSİPLİN",
            "NOT_KAMU_PERSONELİ",
        ),
    ),
    LegalDomain(
        name="Ticaret Hukuku",
        description="Ticari faaliyetler, şirketler",
        examples=(
            "şirket kuruluşu",
            "ticari sözleşme",
            "konkordato",
            "iflas",
            "şirket",
            "ticaret",
            "ortaklık",
            "anonim şirket",
            "limited şirket",
            "işletme",
            "ticari",
        ),
    ),
    LegalDomain(
        name="Vergi Hukuku",
        description="Vergi mükellefiyeti ve vergi uyuşmazlıkları",
        examples=("gelir vergisi", "kdv", "vergi cezası", "vergi iadesi"),
    ),
    LegalDomain(
        name="Turizm Hukuku",
        description=(
            "Turizm teşvikleri, otel işletmeciliği, tatil evi kiralama ve turizm sektörü yasal "
            "düzenlemeleri. Otel işletme BELGESİ, turizm tesis belgesi Turizm Hukuku'dur."
        ),
        examples=(
            "turizm teşvik",
            "otel işletme",
            "otel işletme belgesi",
            "otel işletme belgesini",
            "otel işletme belgesini nasıl",
            "otel belgesi",
            "turizm belgesi",
            "turizm tesis belgesi",
            "tatil evi kiralama",
            "kısa süreli kiralama",
            "airbnb",
            "konaklama işletmesi",
            "otel açmak",
            "pansiyon işletme",
            "tur operatörü",
            "seyahat acentesi",
            "turizm teşvik kanunu",
            "turizm teşvik kanunu avantajları",
            "konaklama",
            "turistik tesis",
            "airbnb için",
            "kısa süreli",
            "tatil evi",
            "otel belgesi",
            "otel işletme belge",
            "turizm",
            "otel",
        ),
    ),
    LegalDomain(
        name="İdare Hukuku",
        description=(
            "Kamu yönetimi, memur hukuku, belediye işlemleri ve idari süreçler. Kamu personeli "
            "disiplin cezaları, idari işlemler, belediye izinleri dahil."
        ),
        examples=(
            "memur hukuku",
            "ihale",
            "ruhsat",
            "belediye",
            "izin",
            "işletme izni",
            "ticaret izni",
            "açmak için izin",
            "dükkan açmak",
            "işyeri açmak",
            "yetki belgesi",
            "kamu personeli",
            "kamu personeli disiplin",
            "disiplin cezası",
            "disiplin cezaları",
            "disiplin soruşturması",
            "idari işlem",
            "idari işlem iptal",
            "idari işlem iptal davası",
            "iptal davası",
            "belediye izni",
            "belediye izin",
            "belediye ruhsatı",
            "mahalli idare",
            "mahalli idare seçim",
            "seçim süreçleri",
            "kamu görevlisi",
            "memur hakları",
            "otel inşaatı için",
            "inşaat için belediye",
            "belediye izni",
            "belediyeden",
            "ruhsat almak",
            "kamu personeli",
            "kamu görevlisi",
            "memur",
            "idari",
            "belediye",
            "disiplin",
            "idari işlem",
        ),
    ),
    LegalDomain(
        name="Sigorta Hukuku",
        description=(
            "Sigorta poliçeleri, hasar tazminatları, sigorta şirket yükümlülükleri ve sigorta "
            "sözleşmeleri. Sigorta şirketi hakları ve yükümlülükleri de Sigorta Hukuku'dur."
        ),
        examples=(
            "kasko sigortası",
            "kasko hasar",
            "sağlık sigortası",
            "hayat sigortası",
            "konut sigortası",
            "hasar tazminatı",
            "sigorta poliçesi",
            "prim ödemesi",
            "sigorta şirketi",
            "sigorta şirketi yükümlülükleri",
            "sigorta şirketi yükümlülükleri nelerdir",
            "sigorta şirketi hakları",
            "trafik sigortası",
            "emeklilik sigortası",
            "sigorta kapsam",
            "sigorta kapsam alanları",
            "sağlık sigortası kapsam",
            "sigorta primi",
            "poliçe şartları",
            "kasko",
            "poliçe",
            "sigorta tazminat",
            "sigorta şirketi",
            "sigorta hasar",
            "sigorta kapsam",
        ),
    ),
    LegalDomain(
        name="İcra ve İflas Hukuku",
        description="Alacak takibi ve iflas işlemleri",
        examples=("icra takibi", "haciz", "iflas", "konkordato"),
    ),
    LegalDomain(
        name="Konut Hukuku",
        description=(
            "Konut edinme, kiralama, ev sahibi-kiracı ilişkileri, gayrimenkul alım satımı ve konut "
            "ile ilgili yasal süreçler. Tapu işlemleri ve tapu belgeleri de Konut Hukuku'dur."
        ),
        examples=(
            "konut edinme",
            "ev kiralama",
            "kiracı hakları",
            "ev sahibi hakları",
            "kira artışı",
            "tahliye",
            "depozito",
            "gayrimenkul alım satım",
            "gayrimenkul alım satım sözleşmesi",
            "tapu devri",
            "tapu işlemleri",
            "tapu işlemlerinde gerekli",
            "tapu işlemlerinde gerekli belgeler",
            "tapu belgeleri",
            "konut kredisi",
            "emlak komisyonu",
            "kiralama sözleşmesi",
            "ev sahibi kiracı",
            "kiracıyı çıkarabilir",
            "tapu",
            "tapu işlem",
            "gayrimenkul",
            "konut",
            "ev sahibi",
            "kiracı",
        ),
    ),
    LegalDomain(
        name=GENERAL_DOMAIN,
        description="Genel hukuki danışmanlık, kanun araştırması ve spesifik olmayan hukuki konular",
        examples=(
            "hukuki danışmanlık",
            "avukat bul",
            "hangi kanun",
            "hukuki yardım",
            "mahkeme süreci",
            "dava açma",
            "yasal süreç",
            "hukuk bürosu",
        ),
    ),
    LegalDomain(
        name="Gayrimenkul Hukuku",
        description="Taşınmaz mallar, imar planlaması ve inşaat hukuku",
        examples=(
            "kat mülkiyeti",
            "inşaat sözleşmesi",
            "imar",
            "kamulaştırma",
            "yapı ruhsatı",
            "imar planı",
        ),
    ),
)

DOMAIN_NAMES: tuple[str, ...] = tuple(domain.name for domain in LEGAL_DOMAINS)


@dataclass(frozen=True)
class ContextRule:
    """Domain-pair disambiguation applied after example matching.

    Fires when every ``all_of`` term and at least one ``any_of`` term (if given)
    occur in the query. ``per_hit`` rules add ``delta`` once per ``any_of`` hit.
    """

    domain: str
    label: str
    delta: float
    all_of: tuple[str, ...] = ()
    any_of: tuple[str, ...] = ()
    per_hit: bool = False

    def score(self, query: str) -> float:
        if any(term not in query for term in self.all_of):
            return 0.0
        hits = sum(1 for term in self.any_of if term in query)
        if self.per_hit:
            return self.delta * hits
        if self.any_of and hits == 0:
            return 0.0
        return self.delta


DOMAIN_CONTEXT_RULES: tuple[ContextRule, ...] = (
    ContextRule(
        "İş Hukuku",
        "is_terimi",
        1.0,
        any_of=("işçi", "kıdem", "tazminat", "çalışan", "işveren", "iş"),
        per_hit=True,
    ),
    ContextRule("İş Hukuku", "kidem_tazminat", 3.0, all_of=("kıdem", "tazminat")),
    ContextRule("İş Hukuku", "is_yerinde", 1.5, all_of=("iş yerinde",)),
    ContextRule("Sigorta Hukuku", "is_yerinde", -0.5, all_of=("iş yerinde",)),
    ContextRule("İdare Hukuku", "idari_ceza", 1.0, all_of=("ceza",), any_of=("disiplin", "personel", "kamu")),
    ContextRule("Ceza Hukuku", "disiplin", -1.0, all_of=("disiplin",)),
    ContextRule("Turizm Hukuku", "otel_belgesi", 1.0, all_of=("otel",), any_of=("belgesi", "işletme")),
)


class DomainModifier(NamedTuple):
    base: float
    complexity: float


DOMAIN_MODIFIERS: dict[str, DomainModifier] = {
    "Medeni Hukuk": DomainModifier(0.8, 0.9),
    "İş Hukuku": DomainModifier(0.85, 0.95),
    "Ceza Hukuku": DomainModifier(0.75, 0.8),
    "Ticaret Hukuku": DomainModifier(0.7, 0.85),
    "Vergi Hukuku": DomainModifier(0.65, 0.7),
    "Turizm Hukuku": DomainModifier(0.8, 0.9),
    "İdare Hukuku": DomainModifier(0.75, 0.85),
    "Sigorta Hukuku": DomainModifier(0.75, 0.85),
    "İcra ve İflas Hukuku": DomainModifier(0.7, 0.8),
    "Konut Hukuku": DomainModifier(0.75, 0.85),
    "Gayrimenkul Hukuku": DomainModifier(0.7, 0.85),
    GENERAL_DOMAIN: DomainModifier(0.5, 0.6),
}

CONFIDENCE_DOMAIN_KEYWORDS: dict[str, tuple[str, ...]] = {
    "İş Hukuku": ("kıdem", "tazminat", "işten", "çıkarma", "çalışma", "mesai", "izin"),
    "Medeni Hukuk": ("boşanma", "evlilik", "miras", "velayet", "nafaka", "mal rejimi"),
    "Ceza Hukuku": ("hırsızlık", "dolandırıcılık", "tehdit", "yaralama", "suç", "ceza"),
    "Ticaret Hukuku": ("şirket", "ticaret", "sözleşme", "borç", "alacak"),
    "Vergi Hukuku": ("vergi", "stopaj", "beyanname", "gelir", "kurumlar"),
    "Turizm Hukuku": ("turizm", "otel", "rehber", "tur", "konaklama"),
    "İdare Hukuku": ("memur", "belediye", "idari", "disiplin", "ruhsat", "ihale", "kamu"),
    "Sigorta Hukuku": ("sigorta", "poliçe", "kasko", "hasar", "prim"),
    "İcra ve İflas Hukuku": ("icra", "haciz", "iflas", "konkordato", "alacak"),
    "Konut Hukuku": ("kira", "kiracı", "tahliye", "tapu", "konut"),
    "Gayrimenkul Hukuku": ("imar", "tapu", "kat mülkiyeti", "kamulaştırma", "inşaat"),
}

# termCoverage: recognised legal nouns
LEGAL_TERM_MARKERS: tuple[str, ...] = ("tazminat", "boşanma", "miras", "hırsızlık", "şirket", "vergi")
GENERIC_LEGAL_WORDS: tuple[str, ...] = ("hukuk", "kanun", "madde", "yasa")

FILTER_DOMAIN_KEYWORDS: dict[str, tuple[str, ...]] = {
    "İş Hukuku": (
        "işçi",
        "çalışan",
        "kıdem",
        "tazminat",
        "ihbar",
        "işveren",
        "sendika",
        "iş",
        "çalışma",
        "personel",
        "mesai",
        "izin",
        "sigorta",
        "işsizlik",
        "emek",
        "sözleşme",
        "ücret",
        "maaş",
        "prim",
        "fazla",
        "vardiya",
        "dinlenme",
        "tatil",
        "doğum",
        "analık",
        "babalık",
    ),
    "Turizm Hukuku": (
        "turizm",
        "otel",
        "konaklama",
        "tatil",
        "kiralama",
        "tesis",
        "belgesi",
        "işletme",
        "pansiyon",
        "tur",
    ),
    "Vergi Hukuku": (
        "vergi",
        "gelir",
        "kdv",
        "stopaj",
        "beyanname",
        "mükellef",
        "tarh",
        "tahakkuk",
        "tahsilat",
        "iade",
        "satış",
        "alış",
        "emlak",
        "gayrimenkul",
        "konut",
        "ev",
        "daire",
        "arsa",
        "tapu",
        "harç",
        "damga",
        "muafiyet",
        "istisna",
    ),
    "Medeni Hukuk": (
        "evlilik",
        "boşanma",
        "miras",
        "velayet",
        "nafaka",
        "aile",
        "çocuk",
        "soyadı",
        "mal",
        "rejim",
    ),
    "Ceza Hukuku": ("suç", "ceza", "hapis", "para", "dava", "savcılık", "mahkeme", "hüküm", "beraat"),
    "Sigorta Hukuku": (
        "sigorta",
        "poliçe",
        "hasar",
        "tazminat",
        "prim",
        "kasko",
        "sağlık",
        "hayat",
        "emeklilik",
    ),
    "Konut Hukuku": (
        "konut",
        "ev",
        "kiracı",
        "sahibi",
        "kira",
        "tahliye",
        "depozito",
        "gayrimenkul",
        "tapu",
    ),
}

DEFAULT_DOMAIN_BOOST: dict[str, float] = {
    "İş Hukuku": 1.3,
    "Turizm Hukuku": 1.2,
    "Vergi Hukuku": 1.2,
    "Medeni Hukuk": 1.1,
    "Ceza Hukuku": 1.1,
}

DEFAULT_PENALTY_TERMS: tuple[str, ...] = (
    "siber güvenlik",
    "spor federasyonu",
    "genel yatırım",
    "finansman programı",
    "kırsal kalkınma",
    "tarıma dayalı",
    "dış ticaret",
    "sanayi",
    "enerji",
)

RANKING_DOMAIN_KEYWORDS: dict[str, tuple[str, ...]] = {
    "İş Hukuku": ("kıdem", "tazminat", "işten", "çıkarma", "çalışma"),
    "Medeni Hukuk": ("boşanma", "evlilik", "miras", "velayet", "nafaka"),
    "Ceza Hukuku": ("hırsızlık", "dolandırıcılık", "tehdit", "yaralama"),
    "Ticaret Hukuku": ("şirket", "ticaret", "sözleşme", "borç"),
    "Vergi Hukuku": ("vergi", "stopaj", "beyanname", "gelir"),
    "Turizm Hukuku": ("turizm", "otel", "konaklama", "tesis"),
    "İdare Hukuku": ("memur", "belediye", "idari", "disiplin"),
    "Sigorta Hukuku": ("sigorta", "poliçe", "kasko", "hasar"),
    "İcra ve İflas Hukuku": ("icra", "haciz", "iflas"),
    "Konut Hukuku": ("kira", "kiracı", "tahliye", "konut"),
    "Gayrimenkul Hukuku": ("imar", "tapu", "kamulaştırma"),
}

RELATED_DOMAINS: dict[str, tuple[str, ...]] = {
    "İş Hukuku": ("Sigorta Hukuku", "İdare Hukuku"),
    "Medeni Hukuk": ("Konut Hukuku", "Gayrimenkul Hukuku"),
    "Ceza Hukuku": ("İdare Hukuku",),
    "Ticaret Hukuku": ("İcra ve İflas Hukuku", "Vergi Hukuku"),
    "Vergi Hukuku": ("Ticaret Hukuku",),
    "Turizm Hukuku": ("İdare Hukuku", "Ticaret Hukuku"),
    "İdare Hukuku": ("Vergi Hukuku",),
    "Sigorta Hukuku": ("İş Hukuku", "Ticaret Hukuku"),
    "İcra ve İflas Hukuku": ("Ticaret Hukuku",),
    "Konut Hukuku": ("Gayrimenkul Hukuku", "Medeni Hukuk"),
    "Gayrimenkul Hukuku": ("Konut Hukuku", "İdare Hukuku"),
}

# checked in order, first hit wins
DOCUMENT_DOMAIN_RULES: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("İş Hukuku", ("kıdem", "işçi")),
    ("Medeni Hukuk", ("boşanma", "miras")),
    ("Ceza Hukuku", ("suç", "ceza")),
    ("Ticaret Hukuku", ("şirket", "ticaret")),
    ("Vergi Hukuku", ("vergi",)),
    ("Turizm Hukuku", ("turizm", "konaklama")),
    ("Sigorta Hukuku", ("sigorta",)),
    ("İcra ve İflas Hukuku", ("icra", "iflas")),
    ("Konut Hukuku", ("kira", "konut")),
    ("Gayrimenkul Hukuku", ("imar", "kat mülkiyeti", "kamulaştırma")),
    ("İdare Hukuku", ("belediye", "memur", "idari")),
)

DOCUMENT_TYPE_RULES: tuple[tuple[str, DocumentType], ...] = (
    ("kanun", "law"),
    ("yönetmelik", "regulation"),
    ("kararname", "decree"),
    ("genelge", "circular"),
    ("karar", "court_decision"),
    ("rehber", "guidance"),
)

SERVICE_TYPE_MAP: dict[str, DocumentType] = {
    "KANUN": "law",
    "CB_KARARNAME": "decree",
    "KHK": "decree",
    "CB_KARAR": "decree",
    "YONETMELIK": "regulation",
    "CB_YONETMELIK": "regulation",
    "KKY": "regulation",
    "UY": "regulation",
    "TUZUK": "regulation",
    "CB_GENELGE": "circular",
    "TEBLIGLER": "guidance",
}

AUTHORITY_SCORES: dict[DocumentType, float] = {
    "law": 1.0,
    "regulation": 0.9,
    "decree": 0.85,
    "court_decision": 0.8,
    "circular": 0.7,
    "interpretation": 0.6,
    "guidance": 0.5,
}

OFFICIAL_AUTHORITY_MARKERS: tuple[str, ...] = ("resmi gazete", "tbmm")

# chunk-level relevance terms for the article detail path
CHUNK_DOMAIN_TERMS: dict[str, tuple[str, ...]] = {
    "Ceza Hukuku": ("suç", "ceza", "hapis", "para cezası", "tck", "türk ceza kanunu"),
    "Medeni Hukuk": ("evlilik", "boşanma", "miras", "tmk", "türk medeni kanunu"),
    "İş Hukuku": ("işçi", "işveren", "iş sözleşmesi", "kıdem", "ihbar"),
    "Ticaret Hukuku": ("şirket", "ticaret", "ttk", "türk ticaret kanunu"),
    "İdare Hukuku": ("idare", "kamu", "belediye", "valilik"),
}


def get_domain(name: str) -> LegalDomain | None:
    for domain in LEGAL_DOMAINS:
        if domain.name == name:
            return domain
    return None


def infer_document_domain(text: str) -> str:
    lowered = turkish_lower(text)
    for domain, keywords in DOCUMENT_DOMAIN_RULES:
        if any(keyword in lowered for keyword in keywords):
            return domain
    return GENERAL_DOMAIN


def infer_document_type(title: str, service_type: str | None = None) -> DocumentType:
    lowered = turkish_lower(title)
    for marker, doc_type in DOCUMENT_TYPE_RULES:
        if marker in lowered:
            return doc_type
    if service_type and service_type.upper() in SERVICE_TYPE_MAP:
        return SERVICE_TYPE_MAP[service_type.upper()]
    return "interpretation"
