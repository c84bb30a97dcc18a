"""MapLibre-based property map component with per-parcel styles and popups."""

import streamlit as st


# HTML template (just libraries)
COMPONENT_HTML = """
<script src="https://unpkg.com/maplibre-gl@4.7.1/dist/maplibre-gl.js"></script>
<link href="https://unpkg.com/maplibre-gl@4.7.1/dist/maplibre-gl.css" rel="stylesheet" />
"""

# CSS for component styling (height controlled here, not via parameter!)
COMPONENT_CSS = """
.map-container {
    width: 100%;
    height: 700px;
    position: relative;
}
.maplibregl-popup-content {
    background: #224428;
    color: white;
    font-size: 12px;
    padding: 10px;
    max-width: 300px;
}
.maplibregl-popup-content strong {
    font-weight: 600;
}
.maplibregl-popup-close-button {
    color: white;
}
.map-status {
    position: absolute;
    top: 0; left: 0; right: 0; bottom: 0;
    background: rgba(255,255,255,0.95);
    display: flex;
    align-items: center;
    justify-content: center;
    z-index: 9999;
    font-family: system-ui;
    font-size: 16px;
    color: #333;
}
"""

# JavaScript component logic
COMPONENT_JS = """
export default function(component) {
    const { parentElement, data, setStateValue } = component;

    // Poll for the MapLibre global every 100ms, give up after 3 seconds
    const WAIT_INTERVAL_MS = 100;
    const MAX_WAIT_ATTEMPTS = 30;

    let map = null;
    let mapContainer = null;
    let statusOverlay = null;
    let waitAttempts = 0;

    function createElementsAndInit() {
        mapContainer = document.createElement('div');
        mapContainer.className = 'map-container';

        statusOverlay = document.createElement('div');
        statusOverlay.className = 'map-status';
        statusOverlay.textContent = 'Loading map...';

        mapContainer.appendChild(statusOverlay);
        parentElement.appendChild(mapContainer);

        initMap();
    }

    function showError(message) {
        console.error(message);
        if (statusOverlay) {
            statusOverlay.textContent = '⚠️ ' + message;
        }
    }

    function initMap() {
        if (typeof maplibregl === 'undefined') {
            if (waitAttempts >= MAX_WAIT_ATTEMPTS) {
                showError('Failed to load map library. Please refresh the page.');
                return;
            }
            waitAttempts++;
            setTimeout(initMap, WAIT_INTERVAL_MS);
            return;
        }

        try {
            buildMap();
        } catch (error) {
            showError('Map initialization failed. Please refresh the page.');
            console.error(error);
        }
    }

    function buildMap() {
        map = new maplibregl.Map({
            container: mapContainer,
            style: {
                version: 8,
                sources: {
                    'carto-light': {
                        type: 'raster',
                        tiles: [
                            'https://a.basemaps.cartocdn.com/light_all/{z}/{x}/{y}.png',
                            'https://b.basemaps.cartocdn.com/light_all/{z}/{x}/{y}.png',
                            'https://c.basemaps.cartocdn.com/light_all/{z}/{x}/{y}.png'
                        ],
                        tileSize: 256,
                        attribution: '&copy; <a href="https://www.openstreetmap.org/copyright">OpenStreetMap</a> contributors &copy; <a href="https://carto.com/attributions">CARTO</a>'
                    }
                },
                layers: [
                    {
                        id: 'carto-light-layer',
                        type: 'raster',
                        source: 'carto-light',
                        minzoom: 0,
                        maxzoom: 19
                    }
                ]
            },
            center: [data.center.lon, data.center.lat],
            zoom: data.zoom
        });

        map.addControl(new maplibregl.NavigationControl(), 'top-right');

        const hoverPopup = new maplibregl.Popup({
            closeButton: false,
            closeOnClick: false,
            maxWidth: '200px'
        });

        map.on('load', () => {
            // Subdivision outlines underneath the parcels
            map.addSource('subdivisions', { type: 'geojson', data: data.subdivisions });
            map.addLayer({
                id: 'subdivisions-line',
                type: 'line',
                source: 'subdivisions',
                paint: {
                    'line-color': ['get', 'strokeColor'],
                    'line-width': ['get', 'strokeWeight']
                }
            });

            map.addSource('parcels', { type: 'geojson', data: data.parcels });
            map.addLayer({
                id: 'parcels-fill',
                type: 'fill',
                source: 'parcels',
                paint: {
                    'fill-color': ['get', 'fillColor'],
                    'fill-opacity': ['get', 'fillOpacity']
                }
            });
            map.addLayer({
                id: 'parcels-line',
                type: 'line',
                source: 'parcels',
                paint: {
                    'line-color': ['get', 'strokeColor'],
                    'line-width': ['get', 'strokeWeight']
                }
            });
            map.addLayer({
                id: 'parcels-line-selected',
                type: 'line',
                source: 'parcels',
                paint: {
                    'line-color': '#000000',
                    'line-width': [
                        'case',
                        ['boolean', ['feature-state', 'selected'], false],
                        3,
                        0
                    ]
                }
            });

            // Address points are opt-in
            map.addSource('addresses', { type: 'geojson', data: data.addresses });
            map.addLayer({
                id: 'addresses-circle',
                type: 'circle',
                source: 'addresses',
                layout: {
                    visibility: data.show_addresses ? 'visible' : 'none'
                },
                paint: {
                    'circle-radius': ['get', 'radius'],
                    'circle-color': ['get', 'fillColor'],
                    'circle-opacity': ['get', 'fillOpacity'],
                    'circle-stroke-color': ['get', 'strokeColor'],
                    'circle-stroke-width': ['get', 'strokeWeight']
                }
            });

            map.on('mouseenter', 'parcels-fill', () => {
                map.getCanvas().style.cursor = 'pointer';
            });

            // Hover label is the account identifier
            map.on('mousemove', 'parcels-fill', (e) => {
                if (!e.features || e.features.length === 0) return;
                const label = document.createElement('div');
                label.textContent = e.features[0].properties.tooltip;
                hoverPopup.setLngLat(e.lngLat).setDOMContent(label).addTo(map);
            });

            map.on('mouseleave', 'parcels-fill', () => {
                map.getCanvas().style.cursor = '';
                hoverPopup.remove();
            });

            let selectedId = null;
            map.on('click', 'parcels-fill', (e) => {
                if (!e.features || e.features.length === 0) return;
                const feature = e.features[0];

                if (selectedId !== null) {
                    map.setFeatureState({ source: 'parcels', id: selectedId }, { selected: false });
                }
                selectedId = feature.id;
                map.setFeatureState({ source: 'parcels', id: selectedId }, { selected: true });

                hoverPopup.remove();
                // Popup HTML is escaped on the Python side
                new maplibregl.Popup({ maxWidth: '300px' })
                    .setLngLat(e.lngLat)
                    .setHTML(feature.properties.popup)
                    .addTo(map);

                setStateValue('selected_account', feature.properties.account_id || null);
            });

            map.on('click', 'addresses-circle', (e) => {
                if (!e.features || e.features.length === 0) return;
                new maplibregl.Popup({ maxWidth: '300px' })
                    .setLngLat(e.lngLat)
                    .setHTML(e.features[0].properties.popup)
                    .addTo(map);
            });

            if (statusOverlay) {
                statusOverlay.remove();
                statusOverlay = null;
            }
        });

        map.on('error', (e) => {
            console.error('MapLibre error:', e);
        });
    }

    createElementsAndInit();

    // Return cleanup function
    return () => {
        if (map) {
            map.remove();
        }
    };
}
"""

# Register the component (v2: name, html, css, js - NO height parameter!)
property_map = st.components.v2.component(
    "maplibre_property_map",
    html=COMPONENT_HTML,
    css=COMPONENT_CSS,
    js=COMPONENT_JS
)


def render_property_map(layers: dict, center: list, zoom: int, show_addresses: bool = False):
    """
    Render the MapLibre property map.

    Args:
        layers: Dict with parcels, subdivisions and addresses FeatureCollections
        center: [lat, lon] for map center
        zoom: Initial zoom level
        show_addresses: Whether the address point overlay is visible

    Returns:
        dict: Component value with selected_account
    """
    return property_map(
        data={
            "parcels": layers["parcels"],
            "subdivisions": layers["subdivisions"],
            "addresses": layers["addresses"],
            "show_addresses": show_addresses,
            "center": {"lat": center[0], "lon": center[1]},
            "zoom": zoom,
        },
        on_selected_account_change=lambda: None  # Required for v2 state capture
    )
