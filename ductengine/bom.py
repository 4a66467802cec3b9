"""
Bill of Materials generation from a solved duct system.

Duct runs are grouped by resolved size with lengths rounded up to whole
metres for ordering, fittings are counted by catalogue id, and diffusers
are counted as one terminal line item. Exports to CSV and JSON.
"""

import csv
import io
import json
import math
from dataclasses import asdict, dataclass
from typing import Dict, List, Optional

from ductengine.dimensions import RoundDuct
from ductengine.fittings import FittingLibrary

DUCT_MATERIAL = 'Galvanized Steel'


@dataclass(frozen=True)
class BOMItem:
    description: str
    size: str
    quantity: int
    unit: str
    length: Optional[float] = None     # m, duct items only
    material: Optional[str] = None


def generate_bom(system, segment_results: Dict, fittings: FittingLibrary) -> List[BOMItem]:
    """
    Aggregate a solved system into purchasable line items.

    Args:
        system: The DuctSystem that was solved.
        segment_results: Segment id → SegmentResult from the solver. Segments
            without a result are left out of the duct totals.
        fittings: Library used to name fittings; unknown ids are skipped.

    Returns:
        Duct items first (one per size), then fittings, then the diffuser count.
    """
    bom: List[BOMItem] = []

    duct_lengths: Dict[str, float] = {}
    for segment in system.segments:
        result = segment_results.get(segment.id)
        if result is None:
            continue
        key = result.duct_size.label
        duct_lengths[key] = duct_lengths.get(key, 0.0) + segment.length

    for size, length in duct_lengths.items():
        bom.append(BOMItem(
            description=f"Duct - {size}",
            size=size,
            quantity=math.ceil(length),
            unit='m',
            length=length,
            material=DUCT_MATERIAL,
        ))

    fitting_counts: Dict[str, List] = {}
    for segment in system.segments:
        for item in segment.fittings:
            fitting = fittings.get(item.fitting_id)
            if fitting is None:
                continue
            entry = fitting_counts.setdefault(item.fitting_id, [fitting.name, 0])
            entry[1] += item.quantity

    for name, count in fitting_counts.values():
        bom.append(BOMItem(description=name, size='-', quantity=count, unit='pcs'))

    diffuser_count = len(system.diffusers())
    if diffuser_count > 0:
        bom.append(BOMItem(description='Diffuser/Grille', size='-', quantity=diffuser_count, unit='pcs'))

    return bom


def summarize_bom(bom: List[BOMItem]) -> Dict:
    """Totals for a BOM: ordered duct metres, fitting pieces and terminals."""
    duct_m = sum(item.quantity for item in bom if item.unit == 'm')
    terminals = sum(item.quantity for item in bom if item.description == 'Diffuser/Grille')
    pieces = sum(item.quantity for item in bom if item.unit == 'pcs') - terminals
    return {
        'duct_length_m': duct_m,
        'duct_sizes': sum(1 for item in bom if item.unit == 'm'),
        'fitting_count': pieces,
        'terminal_count': terminals,
    }


def export_csv(bom: List[BOMItem]) -> str:
    """Export BOM as CSV string."""
    output = io.StringIO()
    writer = csv.writer(output)

    writer.writerow(['Description', 'Size', 'Quantity', 'Unit', 'Length (m)', 'Material'])

    for item in bom:
        writer.writerow([
            item.description,
            item.size,
            item.quantity,
            item.unit,
            f"{item.length:.2f}" if item.length is not None else '',
            item.material or '',
        ])

    summary = summarize_bom(bom)
    writer.writerow(['TOTAL DUCT', '', summary['duct_length_m'], 'm', '', ''])

    return output.getvalue()


def _duct_to_dict(duct) -> Dict:
    if isinstance(duct, RoundDuct):
        return {'shape': 'round', 'diameter': duct.diameter}
    return {'shape': 'rectangular', 'width': duct.width, 'height': duct.height}


def results_to_dict(results) -> Dict:
    """Plain-data view of SystemResults for JSON output."""
    return {
        'total_cfm': results.total_cfm,
        'total_pressure_drop': results.total_pressure_drop,
        'critical_path': list(results.critical_path),
        'critical_path_pressure': results.critical_path_pressure,
        'bom': [asdict(item) for item in results.bom],
        'warnings': list(results.warnings),
        'node_cfm': dict(results.node_cfm),
        'segments': {
            seg_id: {**asdict(r), 'duct_size': _duct_to_dict(r.duct_size)}
            for seg_id, r in results.segments.items()
        },
    }


def export_json(results) -> str:
    """Export solved system results (including the BOM) as JSON string."""
    export_data = results_to_dict(results)
    export_data['bom_summary'] = summarize_bom(results.bom)
    export_data['generated_by'] = 'DuctForge Engine'
    return json.dumps(export_data, indent=2)
