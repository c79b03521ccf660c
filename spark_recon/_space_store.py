"""
Space Store
Loads and saves parking space definitions in the lot XML format.
"""

import logging
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import List, Sequence

from spark_spaces import OrientedRect, ParkingSpace

logger = logging.getLogger(__name__)


def _as_bool(value: str) -> bool:
    return value.strip()[:1] in ('1', 't', 'T', 'y', 'Y') if value else False


def _parse_rotated_rect(node) -> OrientedRect:
    if node is None:
        return OrientedRect((0.0, 0.0), (0.0, 0.0), 0.0)

    center = node.find('center')
    size = node.find('size')
    angle = node.find('angle')

    def attr(element, name):
        return float(element.get(name, 0)) if element is not None else 0.0

    return OrientedRect(
        (attr(center, 'x'), attr(center, 'y')),
        (attr(size, 'w'), attr(size, 'h')),
        attr(angle, 'd')
    )


def _parse_contour(node) -> List:
    if node is None:
        return []
    return [(int(float(point.get('x', 0))), int(float(point.get('y', 0))))
            for point in node.findall('point')]


def parse_spaces(root) -> List[ParkingSpace]:
    """Build ParkingSpace records from a <parking> element"""
    spaces = []
    for node in root.findall('space'):
        spaces.append(ParkingSpace(
            id=int(node.get('id', 0)),
            rect=_parse_rotated_rect(node.find('rotatedRect')),
            contour=_parse_contour(node.find('contour')),
            occupied=_as_bool(node.get('occupied', ''))
        ))
    return spaces


def build_tree(spaces: Sequence[ParkingSpace]) -> ET.ElementTree:
    """Serialize spaces into a <parking> document"""
    parking = ET.Element('parking')
    for space in spaces:
        node = ET.SubElement(parking, 'space', {
            'id': str(int(space.id)),
            'occupied': '1' if space.occupied else '0'
        })

        rect = ET.SubElement(node, 'rotatedRect')
        cx, cy = space.rect.center
        w, h = space.rect.size
        ET.SubElement(rect, 'center', {'x': f'{cx:g}', 'y': f'{cy:g}'})
        ET.SubElement(rect, 'size', {'w': f'{w:g}', 'h': f'{h:g}'})
        ET.SubElement(rect, 'angle', {'d': f'{space.rect.angle:g}'})

        contour = ET.SubElement(node, 'contour')
        for x, y in space.contour:
            ET.SubElement(contour, 'point', {'x': str(int(x)), 'y': str(int(y))})

    tree = ET.ElementTree(parking)
    ET.indent(tree, space='  ')
    return tree


class SpaceStore:
    """Manages parking space definitions and their XML storage."""

    def __init__(self):
        self.spaces: List[ParkingSpace] = []

    def load(self, xml_path: str):
        """
        Load space definitions from an XML file.

        Expected format:
        <parking>
          <space id="1" occupied="0">
            <rotatedRect>
              <center x="..." y="..."/>
              <size w="..." h="..."/>
              <angle d="..."/>
            </rotatedRect>
            <contour>
              <point x="..." y="..."/>
              ...
            </contour>
          </space>
          ...
        </parking>

        Args:
            xml_path: Path to the XML file

        Returns:
            Self for method chaining
        """
        file_path = Path(xml_path)
        if not file_path.exists():
            raise FileNotFoundError(f"Space definition file not found: {file_path}")

        try:
            root = ET.parse(file_path).getroot()
        except ET.ParseError as e:
            logger.error(f"❌ Failed to parse space definitions {file_path}: {e}")
            raise ValueError(f"Failed to load XML file: {file_path}") from e

        if root.tag != 'parking':
            raise ValueError(f"Expected <parking> root in {file_path}, found <{root.tag}>")

        self.spaces = parse_spaces(root)
        logger.info(f"✅ Loaded {len(self.spaces)} spaces from {file_path}")
        return self

    def get(self) -> List[ParkingSpace]:
        """
        Get the currently loaded spaces.

        Returns:
            List of spaces
        """
        return self.spaces

    def save(self, spaces: Sequence[ParkingSpace], xml_path: str):
        """
        Save spaces to file and update in-memory storage.

        Args:
            spaces: Spaces to save
            xml_path: Path to save the XML file
        """
        try:
            file_path = Path(xml_path)
            file_path.parent.mkdir(parents=True, exist_ok=True)

            build_tree(spaces).write(file_path, xml_declaration=True, encoding='utf-8')

            # Update in-memory
            self.spaces = list(spaces)

            logger.info(f"✅ Saved {len(self.spaces)} spaces to {file_path}")

        except Exception as e:
            logger.error(f"❌ Failed to save spaces: {e}")
            raise


def load_spaces(xml_path: str) -> List[ParkingSpace]:
    return SpaceStore().load(xml_path).get()


def save_spaces(spaces: Sequence[ParkingSpace], xml_path: str) -> None:
    SpaceStore().save(spaces, xml_path)
