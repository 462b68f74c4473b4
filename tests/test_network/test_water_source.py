import pytest

from acequia.network import WaterDrawn, WaterSource
from acequia.testing import make_source


class TestWaterSource:
    def test_creates_with_level(self):
        source = WaterSource(id="res", water_level=50.0)
        assert source.water_level == 50.0

    def test_id_cannot_be_empty(self):
        with pytest.raises(ValueError, match="id cannot be empty"):
            make_source(id="")

    def test_level_cannot_be_negative(self):
        with pytest.raises(ValueError, match="water_level cannot be negative"):
            make_source(water_level=-1.0)

    def test_update_water_level(self):
        source = make_source(water_level=100.0)
        source.update_water_level(-40.0)
        assert source.water_level == 60.0

    def test_draw_records_event(self):
        source = make_source(water_level=100.0)
        source.draw(6.0, "c1", t=3)
        assert source.water_level == 94.0
        assert source.events == [WaterDrawn(amount=6.0, canal_id="c1", t=3)]

    def test_reset_restores_initial_level(self):
        source = make_source(water_level=100.0)
        source.draw(6.0, "c1", t=0)
        source.reset()
        assert source.water_level == 100.0
        assert source.events == []
