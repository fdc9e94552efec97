"""Message names understood by the Lightroom controller API.

These are the ``message`` values of request envelopes:
    {"requestId": ..., "object": null, "message": "<name>", "params": [...]}

Profile ``command`` actions refer to the same names.
"""

from __future__ import annotations


class LightroomCommandNames:
    """Lightroom controller API message names."""

    # -------------------------------------------------------------------------
    # Session
    # -------------------------------------------------------------------------

    REGISTER = "register"
    """Register the client; params are [appName, appVersion, clientGUID?]."""

    # -------------------------------------------------------------------------
    # Develop parameters
    # -------------------------------------------------------------------------

    SET_VALUE = "setValue"
    GET_VALUE = "getValue"
    INCREMENT = "increment"
    DECREMENT = "decrement"

    START_TRACKING = "startTracking"
    """Open a low-latency update stream for one parameter."""

    STOP_TRACKING = "stopTracking"

    RESET_TO_DEFAULT = "resetToDefault"
    RESET_ALL_DEVELOP_ADJUSTMENTS = "resetAllDevelopAdjustments"
    SET_AUTO_TONE = "setAutoTone"
    TOGGLE_BLACK_AND_WHITE = "toggleBlackAndWhite"

    # -------------------------------------------------------------------------
    # View and navigation
    # -------------------------------------------------------------------------

    SHOW_VIEW = "showView"
    NEXT_PHOTO = "nextPhoto"
    PREVIOUS_PHOTO = "previousPhoto"
    ZOOM_IN = "zoomIn"
    ZOOM_OUT = "zoomOut"
    TOGGLE_ZOOM = "toggleZoom"

    # -------------------------------------------------------------------------
    # Ratings, flags and labels
    # -------------------------------------------------------------------------

    RATING_PREFIX = "rating"
    """Suffixed with 1-5, e.g. ``rating5``."""

    FLAG_PICK = "flagPick"
    FLAG_REJECT = "flagReject"
    FLAG_UNFLAG = "flagUnflag"

    COLOR_LABEL_PREFIX = "colorLabel"
    """Suffixed with the capitalized color, e.g. ``colorLabelRed``."""

    # -------------------------------------------------------------------------
    # Presets and parameter metadata
    # -------------------------------------------------------------------------

    APPLY_PRESET = "applyPreset"
    GET_PRESET_IDS = "getPresetIDs"
    GET_PARAMETER_NAMES = "getParameterNames"
    GET_RANGE = "getRange"
    GET_DEFAULT = "getDefault"
    GET_LABEL = "getLabel"
    GET_PARAMETER_TYPE = "getParameterType"
