"""
Flag catalog: the 15 red-flag indicators calibrated for Ecuador.

Based on the Open Contracting Partnership Red Flags guide (2024) and the
reformed LOSNCP (7 Oct 2025). Codes are a published vocabulary used by
search filters downstream: never renumber or reuse one.
"""
from typing import Dict, List, Optional

from ..models import Flag

FLAG_CATALOG: Dict[str, dict] = {
    'IC-01': {
        'code': 'IC-01', 'category': 'competition', 'name': 'Single Bidder',
        'name_es': 'Proveedor Único en Proceso Competitivo',
        'description_es': 'Solo un oferente participó en un proceso que debería ser competitivo.',
        'severity': 2, 'ocp_ref': 'R018',
    },
    'IC-02': {
        'code': 'IC-02', 'category': 'competition', 'name': 'High Value No Competition',
        'name_es': 'Alto Valor Sin Competencia',
        'description_es': 'Adjudicación directa o ínfima cuantía por monto superior al umbral permitido.',
        'severity': 3, 'ocp_ref': 'R055',
    },
    'IT-01': {
        'code': 'IT-01', 'category': 'timing', 'name': 'Insufficient Publication Period',
        'name_es': 'Plazo de Publicación Insuficiente',
        'description_es': 'El período entre publicación y cierre de ofertas es menor al mínimo legal.',
        'severity': 1, 'ocp_ref': 'R003',
    },
    'IT-02': {
        'code': 'IT-02', 'category': 'timing', 'name': 'Lightning Award',
        'name_es': 'Adjudicación Relámpago',
        'description_es': 'La adjudicación ocurrió en menos de 3 días hábiles desde la publicación.',
        'severity': 2, 'ocp_ref': 'R061',
    },
    'IP-01': {
        'code': 'IP-01', 'category': 'price', 'name': 'Value Near Threshold',
        'name_es': 'Valor Cercano al Umbral de Ínfima Cuantía',
        'description_es': 'El monto está entre 85% y 100% del umbral de ínfima cuantía, posible fraccionamiento.',
        'severity': 2, 'ocp_ref': 'R011',
    },
    'IP-02': {
        'code': 'IP-02', 'category': 'price', 'name': 'Significant Price Difference',
        'name_es': 'Diferencia Significativa Presupuesto vs Adjudicación',
        'description_es': 'El monto adjudicado difiere más de 15% del presupuesto referencial.',
        'severity': 2, 'ocp_ref': 'R059',
    },
    'IP-03': {
        'code': 'IP-03', 'category': 'price', 'name': 'Significant Contract Amendment',
        'name_es': 'Modificación Contractual Significativa',
        'description_es': 'El contrato recibió enmiendas que incrementan su valor más del 15%.',
        'severity': 3, 'ocp_ref': 'R069',
    },
    'CC-01': {
        'code': 'CC-01', 'category': 'concentration', 'name': 'Recurring Supplier Ínfima',
        'name_es': 'Proveedor Recurrente en Ínfima Cuantía',
        'description_es': 'Mismo proveedor gana 5+ ínfimas cuantías del mismo comprador en un año fiscal.',
        'severity': 3, 'ocp_ref': None,
    },
    'CC-02': {
        'code': 'CC-02', 'category': 'concentration', 'name': 'Dominant Supplier',
        'name_es': 'Proveedor Dominante',
        'description_es': 'Un proveedor recibe más del 30% del gasto total de un comprador en un año.',
        'severity': 3, 'ocp_ref': 'R051',
    },
    'CC-03': {
        'code': 'CC-03', 'category': 'concentration', 'name': 'Historically Permanent Supplier',
        'name_es': 'Proveedor Histórico Permanente',
        'description_es': 'Un proveedor gana contratos del mismo comprador en 5+ de los últimos 7 años.',
        'severity': 2, 'ocp_ref': None,
    },
    'CC-04': {
        'code': 'CC-04', 'category': 'concentration', 'name': 'Recurring Consortium Member',
        'name_es': 'Miembro Recurrente de Consorcio',
        'description_es': 'Una persona/empresa aparece en 8+ consorcios diferentes en 3 años.',
        'severity': 2, 'ocp_ref': 'R070',
    },
    'CC-05': {
        'code': 'CC-05', 'category': 'concentration', 'name': 'Possible Splitting',
        'name_es': 'Posible Fraccionamiento',
        'description_es': '3+ contratos con CPC similar del mismo comprador en 90 días cuya suma supera el umbral.',
        'severity': 3, 'ocp_ref': 'R011',
    },
    'TR-01': {
        'code': 'TR-01', 'category': 'transparency', 'name': 'Critical Missing Information',
        'name_es': 'Información Incompleta Crítica',
        'description_es': 'Faltan campos esenciales: comprador, valor, proveedor o método de contratación.',
        'severity': 1, 'ocp_ref': 'R001',
    },
    'TR-02': {
        'code': 'TR-02', 'category': 'transparency', 'name': 'Generic Description',
        'name_es': 'Descripción Genérica',
        'description_es': 'La descripción del proceso tiene menos de 30 caracteres.',
        'severity': 0, 'ocp_ref': 'R013',
    },
    'TR-03': {
        'code': 'TR-03', 'category': 'transparency', 'name': 'No Special Regime Justification',
        'name_es': 'Sin Justificación de Régimen Especial',
        'description_es': 'Proceso de régimen especial sin justificación documentada.',
        'severity': 2, 'ocp_ref': 'R039',
    },
}

# Tie-break order when scoring flags of equal severity
CATALOG_ORDER: Dict[str, int] = {code: i for i, code in enumerate(FLAG_CATALOG)}


def make_flag(code: str, detail: Optional[str] = None) -> Flag:
    """Active flag for ``code`` with an evidence string."""
    return Flag(**FLAG_CATALOG[code], active=True, detail=detail)


def dedupe_flags(flags: List[Flag]) -> List[Flag]:
    """Keep the first flag per code, drop later ones."""
    seen = set()
    unique = []
    for flag in flags:
        if flag.code in seen:
            continue
        seen.add(flag.code)
        unique.append(flag)
    return unique
