# -*- coding: utf-8 -*-
"""Static maps and charts (matplotlib, seaborn) and interactive web maps (folium)."""
