"""Tests reading DXF files written by ezdxf."""

import pytest
from dxf_factory import HIDDEN_LAYER, LINE_LAYER, SURVEY_LAYER, SURVEY_POINTS, SURVEY_TEXTS

from dxfcloud.io import DXFReader


class TestEzdxfFiles:
    """Read a complete R2010 drawing."""

    @pytest.fixture
    def layers(self, survey_dxf_file):
        reader = DXFReader(survey_dxf_file, strict=True)
        reader.load_file()
        return reader.read_layers()

    def test_layer_styles(self, layers):
        survey = layers[SURVEY_LAYER]
        assert survey.color_number == 3
        assert survey.line_type == "DASHED"
        assert survey.visible

        hidden = layers[HIDDEN_LAYER]
        assert hidden.color_number == 5
        assert not hidden.visible

        assert layers[LINE_LAYER].color_number == 1

    def test_entities_by_layer(self, layers):
        survey = layers[SURVEY_LAYER]
        assert len(survey.entities_of_type("TEXT")) == len(SURVEY_TEXTS)
        assert len(survey.entities_of_type("POINT")) == len(SURVEY_POINTS)
        assert len(layers[LINE_LAYER].entities_of_type("LINE")) == 2
        assert len(layers[HIDDEN_LAYER].entities_of_type("TEXT")) == 1

    def test_text_values(self, layers):
        texts = layers[SURVEY_LAYER].entities_of_type("TEXT")
        for entity, ((x, y), content) in zip(texts, SURVEY_TEXTS):
            assert float(entity.get(10)) == x
            assert float(entity.get(20)) == y
            assert entity.get(1) == content

    def test_blocks_section_is_not_read_as_entities(self, layers):
        """BLOCK/ENDBLK records of the BLOCKS section do not show up as entities."""
        for layer in layers.values():
            types = {entity.type for entity in layer.entities}
            assert "BLOCK" not in types
            assert "ENDBLK" not in types
