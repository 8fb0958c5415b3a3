"""WTML (WorldWide Telescope XML) rendering for legacy Places."""

from __future__ import annotations

import xml.etree.ElementTree as ET

from constellations.directory.images import Image
from constellations.scenes.resolver import LegacyPlace


def _fmt(value: float) -> str:
    return repr(float(value))


def imageset_element(image: Image, parent: ET.Element, name: str) -> ET.Element:
    wwt = image.wwt
    iset = ET.SubElement(parent, "ImageSet")
    iset.set("BandPass", "Visible")
    iset.set("BaseDegreesPerTile", _fmt(wwt.base_degrees_per_tile))
    iset.set("BaseTileLevel", "0")
    iset.set("BottomsUp", "True" if wwt.bottoms_up else "False")
    iset.set("CenterX", _fmt(wwt.center_x))
    iset.set("CenterY", _fmt(wwt.center_y))
    iset.set("DataSetType", "Sky")
    iset.set("FileType", wwt.file_type)
    iset.set("Name", name)
    iset.set("OffsetX", _fmt(wwt.offset_x))
    iset.set("OffsetY", _fmt(wwt.offset_y))
    iset.set("Projection", wwt.projection)
    iset.set("QuadTreeMap", wwt.quad_tree_map)
    iset.set("Rotation", _fmt(wwt.rotation))
    iset.set("Sparse", "True")
    iset.set("TileLevels", str(wwt.tile_levels))
    iset.set("Url", image.storage.legacy_url_template or "")
    iset.set("WidthFactor", str(wwt.width_factor))

    if image.permissions.credits:
        ET.SubElement(iset, "Credits").text = image.permissions.credits
    ET.SubElement(iset, "ThumbnailUrl").text = wwt.thumbnail_url
    return iset


def place_to_wtml(place: LegacyPlace, image: Image) -> str:
    """Serialize a Place inside a browseable Folder, pretty-printed."""
    root = ET.Element("Folder")
    root.set("Browseable", "True")
    root.set("Group", "Explorer")
    root.set("Name", place.name)
    root.set("Searchable", "True")
    root.set("Type", "Sky")

    pl = ET.SubElement(root, "Place")
    pl.set("DataSetType", "Sky")
    pl.set("Angle", "0")
    pl.set("AngularSize", "0")
    pl.set("Magnitude", "0")
    pl.set("Opacity", "100")
    pl.set("Dec", _fmt(place.dec_deg))
    pl.set("Name", place.name)
    pl.set("RA", _fmt(place.ra_hours))
    pl.set("Rotation", _fmt(place.rotation_deg))
    pl.set("ZoomLevel", _fmt(place.zoom_level))

    fg = ET.SubElement(pl, "ForegroundImageSet")
    imageset_element(image, fg, place.name)

    ET.indent(root)
    return '<?xml version="1.0"?>\n' + ET.tostring(root, encoding="unicode")
