"""Adaptive personalization API routes.

Interaction tracking, component controls, layout, circadian theme, behavior
profile and content preferences, all backed by the process-wide engine.
"""
from enum import Enum
from fastapi import APIRouter, Depends, HTTPException, Query

from mood_analytics.engine import AdaptiveEngine

from ..database import get_engine
from ..models.adaptive import (
    AdaptiveLayoutOut,
    ComponentState,
    ComponentStatsOut,
    DwellIn,
    DwellResult,
    InteractionIn,
    LayoutConfigOut,
    LayoutModeIn,
    PreferencesOut,
    PreferencesUpdate,
    ProfileOut,
    ThemeOut,
)

router = APIRouter(prefix="/api/adaptive", tags=["Adaptive"])


class ComponentAction(str, Enum):
    PIN = "pin"
    UNPIN = "unpin"
    HIDE = "hide"
    SHOW = "show"


class ResetScope(str, Enum):
    LAYOUT = "layout"
    LEARNING = "learning"


def _component_state(engine: AdaptiveEngine, component_id: str, changed=None) -> ComponentState:
    return ComponentState(
        component_id=component_id,
        priority=engine.get_component_priority(component_id),
        widget_state=engine.get_widget_state(component_id),
        changed=changed,
    )


# ============================================================================
# Tracking
# ============================================================================


@router.post("/interactions", response_model=ComponentStatsOut)
async def track_interaction(
    interaction: InteractionIn,
    engine: AdaptiveEngine = Depends(get_engine),
):
    """Record a UI interaction stamped with the server's current time."""
    stats = engine.track_interaction(
        interaction.component_id,
        interaction.component_kind,
        interaction.action,
        duration_ms=interaction.duration_ms,
        metadata=interaction.metadata,
    )
    return ComponentStatsOut.from_stats(stats)


@router.post("/dwell", response_model=DwellResult)
async def track_dwell(dwell: DwellIn, engine: AdaptiveEngine = Depends(get_engine)):
    """Add dwell time; ignored for components with no prior interaction."""
    tracked = engine.track_dwell(dwell.component_id, dwell.duration_ms)
    return DwellResult(
        tracked=tracked,
        priority=engine.get_component_priority(dwell.component_id),
    )


# ============================================================================
# Components
# ============================================================================


@router.get("/components/{component_id}", response_model=ComponentState)
async def get_component(component_id: str, engine: AdaptiveEngine = Depends(get_engine)):
    """Priority and widget state; unknown components report priority 0."""
    return _component_state(engine, component_id)


@router.post("/components/{component_id}/{action}", response_model=ComponentState)
async def change_component(
    component_id: str,
    action: ComponentAction,
    engine: AdaptiveEngine = Depends(get_engine),
):
    """Pin, unpin, hide or show a component."""
    handlers = {
        ComponentAction.PIN: engine.pin_component,
        ComponentAction.UNPIN: engine.unpin_component,
        ComponentAction.HIDE: engine.hide_component,
        ComponentAction.SHOW: engine.show_component,
    }
    changed = handlers[action](component_id)
    return _component_state(engine, component_id, changed)


# ============================================================================
# Layout
# ============================================================================


@router.get("/layout", response_model=AdaptiveLayoutOut)
async def get_layout(engine: AdaptiveEngine = Depends(get_engine)):
    """Layout config plus visible components, highest priority first."""
    return AdaptiveLayoutOut(
        config=LayoutConfigOut.from_config(engine.layout_config),
        components=[ComponentStatsOut.from_stats(s) for s in engine.get_adaptive_layout()],
    )


@router.put("/layout/mode", response_model=LayoutConfigOut)
async def set_layout_mode(body: LayoutModeIn, engine: AdaptiveEngine = Depends(get_engine)):
    return LayoutConfigOut.from_config(engine.set_layout_mode(body.mode))


@router.post("/layout/toggle-gamification", response_model=LayoutConfigOut)
async def toggle_gamification(engine: AdaptiveEngine = Depends(get_engine)):
    return LayoutConfigOut.from_config(engine.toggle_gamification())


@router.post("/layout/toggle-social", response_model=LayoutConfigOut)
async def toggle_social(engine: AdaptiveEngine = Depends(get_engine)):
    return LayoutConfigOut.from_config(engine.toggle_social())


# ============================================================================
# Theme, profile and recommendations
# ============================================================================


@router.get("/theme", response_model=ThemeOut)
async def get_theme(engine: AdaptiveEngine = Depends(get_engine)):
    """Current circadian theme."""
    return ThemeOut.from_theme(engine.get_circadian_config())


@router.get("/profile", response_model=ProfileOut)
async def get_profile(engine: AdaptiveEngine = Depends(get_engine)):
    return ProfileOut.from_profile(engine.profile)


@router.get("/recommendations", response_model=list[str])
async def get_recommendations(engine: AdaptiveEngine = Depends(get_engine)):
    """Most-used component identifiers from the behavior profile."""
    return engine.get_recommended_features()


# ============================================================================
# Preferences and learning
# ============================================================================


@router.get("/preferences", response_model=PreferencesOut)
async def get_preferences(engine: AdaptiveEngine = Depends(get_engine)):
    return PreferencesOut.from_preferences(engine.preferences)


@router.patch("/preferences", response_model=PreferencesOut)
async def update_preferences(
    update: PreferencesUpdate,
    engine: AdaptiveEngine = Depends(get_engine),
):
    """Merge the supplied fields into the content preferences."""
    changes = update.model_dump(exclude_unset=True, exclude_none=True)
    try:
        prefs = engine.update_content_preferences(**changes)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return PreferencesOut.from_preferences(prefs)


@router.post("/learning/toggle")
async def toggle_learning(engine: AdaptiveEngine = Depends(get_engine)):
    return {"learning_enabled": engine.toggle_learning()}


@router.post("/reset")
async def reset(
    scope: ResetScope = Query(ResetScope.LAYOUT, description="What to reset"),
    engine: AdaptiveEngine = Depends(get_engine),
):
    """
    Clear usage statistics, interaction log and behavior profile.

    scope=layout also restores the default layout; scope=learning keeps it.
    Content preferences survive both.
    """
    if scope == ResetScope.LAYOUT:
        engine.reset_layout()
    else:
        engine.reset_learning()
    return {"status": "reset", "scope": scope.value}


@router.get("/status")
async def get_status(engine: AdaptiveEngine = Depends(get_engine)):
    """Combined engine status for monitoring and debugging."""
    return engine.get_status()
