"""masterdl — reconstruye un video a partir de un master.json segmentado.

Lee el manifiesto (archivo local o URL), elige una representación y
concatena el segmento inicial y los segmentos, en orden, en un solo archivo.
"""

__version__ = "0.1.0"
