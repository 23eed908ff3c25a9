"""Browser-side interaction for the chain-flow page.

The server renders the diagram as SVG; this script adds the interactive
layer on top of it:
- Wheel, toolbar and drag handling for zoom and pan
- Fit-to-container and reset controls
- Chain selection from nodes and count badges, with a detail panel that
  lists incoming and outgoing jumps as clickable tags

Design Decision: Mirror ``core.view_state`` instead of re-deriving it
Rationale: The zoom limits and step are injected from the Python constants,
and each handler applies the same transition as the matching ``reduce``
branch, so the page and the reducer cannot drift apart.
"""

import orjson

from .....core.view_state import DEFAULT_ZOOM, MAX_ZOOM, MIN_ZOOM, ZOOM_STEP


def get_view_config(table_filter: str) -> str:
    """Generate the configuration block read by the page script.

    Args:
        table_filter: Table filter the page was rendered for

    Returns:
        JavaScript ``const`` declaration
    """
    config = orjson.dumps(
        {
            "minZoom": MIN_ZOOM,
            "maxZoom": MAX_ZOOM,
            "defaultZoom": DEFAULT_ZOOM,
            "zoomStep": ZOOM_STEP,
            "table": table_filter,
        }
    ).decode()
    # Keep a table name from closing the script element
    config = config.replace("</", "<\\/")
    return f"const VIEW_CONFIG = {config};"


def get_all_scripts(table_filter: str) -> str:
    """Generate all JavaScript for the chain-flow page.

    Args:
        table_filter: Table filter the page was rendered for

    Returns:
        Complete JavaScript code as a single string
    """
    return get_view_config(table_filter) + _SCRIPT


_SCRIPT = """
// ============================================================================
// VIEW STATE
// ============================================================================

const view = {
    zoom: VIEW_CONFIG.defaultZoom,
    panX: 0,
    panY: 0,
    isPanning: false,
    anchorX: 0,
    anchorY: 0,
    selectedChain: null
};

function clampZoom(zoom) {
    return Math.max(VIEW_CONFIG.minZoom, Math.min(VIEW_CONFIG.maxZoom, zoom));
}

function applyTransform() {
    const canvas = document.getElementById('canvas');
    const scale = view.zoom / 100;
    canvas.style.transform = `translate(${view.panX}px, ${view.panY}px) scale(${scale})`;
    document.getElementById('zoom-level').textContent = `${Math.round(view.zoom)}%`;
}

function zoomBy(step) {
    view.zoom = clampZoom(view.zoom + step);
    applyTransform();
}

function canvasSize() {
    const svg = document.querySelector('#canvas svg');
    if (!svg) {
        return {width: 0, height: 0};
    }
    return {
        width: parseFloat(svg.getAttribute('width')) || 0,
        height: parseFloat(svg.getAttribute('height')) || 0
    };
}

function fitToContainer() {
    const container = document.getElementById('canvas-container');
    const size = canvasSize();
    if (size.width <= 0 || size.height <= 0) {
        view.zoom = VIEW_CONFIG.defaultZoom;
    } else {
        const scale = Math.min(
            container.clientWidth / size.width,
            container.clientHeight / size.height,
            1
        );
        view.zoom = clampZoom(scale * 100);
    }
    view.panX = 0;
    view.panY = 0;
    applyTransform();
}

function resetView() {
    view.zoom = VIEW_CONFIG.defaultZoom;
    view.panX = 0;
    view.panY = 0;
    applyTransform();
}

// ============================================================================
// PAN AND ZOOM HANDLERS
// ============================================================================

function onWheel(event) {
    event.preventDefault();
    if (event.deltaY === 0) {
        return;
    }
    zoomBy(event.deltaY < 0 ? VIEW_CONFIG.zoomStep : -VIEW_CONFIG.zoomStep);
}

function onPointerDown(event) {
    // Clicks on nodes and badges select a chain instead of panning
    if (event.target.closest('.node, .badge')) {
        return;
    }
    view.isPanning = true;
    view.anchorX = event.clientX - view.panX;
    view.anchorY = event.clientY - view.panY;
    document.getElementById('canvas-container').classList.add('panning');
}

function onPointerMove(event) {
    if (!view.isPanning) {
        return;
    }
    view.panX = event.clientX - view.anchorX;
    view.panY = event.clientY - view.anchorY;
    applyTransform();
}

function onPointerUp() {
    if (!view.isPanning) {
        return;
    }
    view.isPanning = false;
    document.getElementById('canvas-container').classList.remove('panning');
}

// ============================================================================
// CHAIN SELECTION AND DETAIL PANEL
// ============================================================================

function escapeHtml(text) {
    const div = document.createElement('div');
    div.textContent = text == null ? '' : String(text);
    return div.innerHTML;
}

function formatBytes(bytes) {
    if (!bytes) {
        return '0 B';
    }
    const units = ['B', 'KB', 'MB', 'GB', 'TB'];
    const i = Math.min(Math.floor(Math.log(bytes) / Math.log(1024)), units.length - 1);
    return `${parseFloat((bytes / Math.pow(1024, i)).toFixed(2))} ${units[i]}`;
}

function relationTags(relations, key) {
    if (!relations.length) {
        return '<span class="muted">none</span>';
    }
    return relations.map(r =>
        `<button class="relation-tag" data-chain="${escapeHtml(r[key])}">` +
        `${escapeHtml(r[key])} <span class="count">${r.count}</span></button>`
    ).join(' ');
}

function rulesTable(rules) {
    if (!rules.length) {
        return '<p class="muted">Chain has no rules of its own</p>';
    }
    const rows = rules.map(r => `
        <tr>
            <td>${escapeHtml(r.line_number)}</td>
            <td>${escapeHtml(r.table)}</td>
            <td class="target">${escapeHtml(r.target)}</td>
            <td>${escapeHtml(r.protocol)}</td>
            <td>${escapeHtml(r.source)}</td>
            <td>${escapeHtml(r.destination)}</td>
            <td>${escapeHtml(r.packets)}</td>
        </tr>`).join('');
    return `<table class="rules">
        <thead><tr><th>#</th><th>Table</th><th>Target</th><th>Prot</th>
        <th>Source</th><th>Destination</th><th>Packets</th></tr></thead>
        <tbody>${rows}</tbody>
    </table>`;
}

function renderDetail(detail) {
    const panel = document.getElementById('detail-panel');
    panel.innerHTML = `
        <div class="detail-header">
            <h2 style="color: ${escapeHtml(detail.color)}">${escapeHtml(detail.chain)}</h2>
            <button id="detail-close" title="Close">&times;</button>
        </div>
        <p class="muted">${escapeHtml(detail.description)}</p>
        <p>${detail.rule_count} rules &middot; ${detail.packets} packets &middot;
           ${formatBytes(detail.bytes)} &middot; ${escapeHtml(detail.tables.join(', '))}</p>
        <h3>Jumped from</h3>
        <div class="relations">${relationTags(detail.incoming, 'from')}</div>
        <h3>Jumps to</h3>
        <div class="relations">${relationTags(detail.outgoing, 'to')}</div>
        <h3>Rules</h3>
        ${rulesTable(detail.rules)}
    `;
    panel.hidden = false;
    document.getElementById('detail-close').addEventListener('click', closeDetail);
}

function highlightSelection() {
    document.querySelectorAll('.node').forEach(node => {
        node.classList.toggle('selected', node.dataset.chain === view.selectedChain);
    });
}

async function selectChain(chain) {
    view.selectedChain = chain;
    highlightSelection();
    const params = new URLSearchParams({table: VIEW_CONFIG.table});
    try {
        const response = await fetch(
            `/api/chains/${encodeURIComponent(chain)}?${params}`
        );
        const data = await response.json();
        if (!response.ok) {
            throw new Error(data.error || response.statusText);
        }
        // A newer selection may have replaced this one while loading
        if (view.selectedChain === chain) {
            renderDetail(data);
        }
    } catch (error) {
        console.error(`Failed to load chain ${chain}:`, error);
        const panel = document.getElementById('detail-panel');
        panel.innerHTML = `<p class="error">${escapeHtml(error.message)}</p>`;
        panel.hidden = false;
    }
}

function closeDetail() {
    view.selectedChain = null;
    highlightSelection();
    const panel = document.getElementById('detail-panel');
    panel.hidden = true;
    panel.innerHTML = '';
}

function onCanvasClick(event) {
    const node = event.target.closest('.node');
    if (node) {
        selectChain(node.dataset.chain);
        return;
    }
    // A count badge opens the chain the jump leads to
    const badge = event.target.closest('.badge');
    if (badge) {
        selectChain(badge.dataset.to);
    }
}

function onDetailClick(event) {
    const tag = event.target.closest('.relation-tag');
    if (tag) {
        selectChain(tag.dataset.chain);
    }
}

// ============================================================================
// INITIALIZATION
// ============================================================================

document.addEventListener('DOMContentLoaded', () => {
    const container = document.getElementById('canvas-container');
    container.addEventListener('wheel', onWheel, {passive: false});
    container.addEventListener('mousedown', onPointerDown);
    container.addEventListener('mousemove', onPointerMove);
    container.addEventListener('mouseup', onPointerUp);
    container.addEventListener('mouseleave', onPointerUp);
    container.addEventListener('click', onCanvasClick);

    document.getElementById('detail-panel').addEventListener('click', onDetailClick);
    document.getElementById('zoom-in').addEventListener(
        'click', () => zoomBy(VIEW_CONFIG.zoomStep)
    );
    document.getElementById('zoom-out').addEventListener(
        'click', () => zoomBy(-VIEW_CONFIG.zoomStep)
    );
    document.getElementById('zoom-fit').addEventListener('click', fitToContainer);
    document.getElementById('zoom-reset').addEventListener('click', resetView);

    document.addEventListener('keydown', event => {
        if (event.key === 'Escape') {
            closeDetail();
        }
    });

    applyTransform();
});
"""
