from typing import List, Optional, Sequence, Tuple

from flask import Flask, render_template, request, redirect, url_for, flash
import folium

import settings
from google_distance import build_road_distance_matrix, fetch_route_polyline, has_unreachable_pairs
from sites import Site, build_distance_matrix, read_sites, validate_coordinate
from tsp_solver import RouteFinderError, SOLVER_NAMES, solve, tour_length

app = Flask(__name__)
app.secret_key = settings.SECRET_KEY


def parse_coordinates(form) -> List[Tuple[float, float]]:
    lats = form.getlist("lat[]")
    lons = form.getlist("lon[]")
    coords: List[Tuple[float, float]] = []
    for lat_str, lon_str in zip(lats, lons):
        if lat_str.strip() == "" or lon_str.strip() == "":
            continue
        try:
            lat = float(lat_str)
            lon = float(lon_str)
        except ValueError:
            raise ValueError("Latitude/Longitude must be numeric.")
        coords.append(validate_coordinate(lat, lon))
    return coords


def parse_sites_upload(files) -> Optional[List[Site]]:
    upload = files.get("sites_file")
    if upload is None or not upload.filename:
        return None
    return read_sites(upload.stream)


def sites_from_coordinates(coords: List[Tuple[float, float]]) -> List[Site]:
    return [Site(i, f"Site {i}", "", "", "", "", lat, lon) for i, (lat, lon) in enumerate(coords, start=1)]


def check_point_count(count: int, brute_force: bool):
    limit = settings.MAX_BRUTE_FORCE_POINTS if brute_force else settings.MAX_POINTS
    if count < 2:
        raise ValueError("Please enter at least 2 valid coordinate pairs.")
    if count > limit:
        if brute_force:
            raise ValueError(f"Brute force is limited to {limit} points. Use Held-Karp for larger inputs.")
        raise ValueError(f"Please limit to {limit} points.")


def add_markers_in_order(m: folium.Map, coords: List[Tuple[float, float]], names: List[str], order: List[int]):
    for visit_idx, node in enumerate(order[:-1], start=1):
        lat, lon = coords[node]
        if visit_idx == 1:
            # Start point
            icon = folium.Icon(color="green", icon="play")
            label = f"Start: {names[node]} ({lat:.4f}, {lon:.4f})"
        else:
            icon = folium.Icon(color="blue", icon="flag")
            label = f"Stop {visit_idx}: {names[node]} ({lat:.4f}, {lon:.4f})"
        folium.Marker([lat, lon], popup=label, tooltip=label, icon=icon).add_to(m)

    # Closing node = back to start
    lat, lon = coords[order[-1]]
    folium.Marker(
        [lat, lon],
        popup="Return to Start",
        tooltip="Return to Start",
        icon=folium.Icon(color="red", icon="home")
    ).add_to(m)


def draw_leg(m: folium.Map, start: Tuple[float, float], end: Tuple[float, float], road: bool):
    path = None
    if road:
        path = fetch_route_polyline(start, end, settings.GOOGLE_MAPS_API_KEY, settings.REQUEST_TIMEOUT)
        if path is None:
            app.logger.warning("No driving path between %s and %s, drawing a straight leg", start, end)
    if path is None:
        path = [start, end]
    folium.PolyLine(path, weight=4, opacity=0.8, color="blue").add_to(m)


def build_route_map(coords: Sequence[Tuple[float, float]], names: List[str], order: List[int], road: bool) -> str:
    m = folium.Map(location=coords[order[0]], zoom_start=10, control_scale=True)
    add_markers_in_order(m, list(coords), names, order)
    for a, b in zip(order, order[1:]):
        draw_leg(m, coords[a], coords[b], road)

    # Auto-zoom map to fit all points
    m.fit_bounds([coords[node] for node in order])
    return m._repr_html_()


@app.route("/", methods=["GET", "POST"])
def index():
    if request.method == "POST":
        brute_force = request.form.get("brute_force") == "on"
        try:
            sites = parse_sites_upload(request.files)
            if sites is None:
                sites = sites_from_coordinates(parse_coordinates(request.form))
            check_point_count(len(sites), brute_force)
        except (ValueError, RouteFinderError) as e:
            flash(str(e), "error")
            return redirect(url_for("index"))

        coords = [site.coordinate for site in sites]
        names = [site.name for site in sites]
        road = settings.use_road_distances()
        try:
            if road:
                dist = build_road_distance_matrix(coords, settings.GOOGLE_MAPS_API_KEY, settings.REQUEST_TIMEOUT)
            else:
                dist = build_distance_matrix(coords)
        except RouteFinderError as e:
            app.logger.warning("Distance matrix failed: %s", e)
            flash(str(e), "error")
            return redirect(url_for("index"))

        if has_unreachable_pairs(dist):
            flash("Some locations are unreachable by road. Please adjust your inputs.", "error")
            return redirect(url_for("index"))

        try:
            result = solve(dist, brute_force=brute_force)
        except RouteFinderError as e:
            flash(str(e), "error")
            return redirect(url_for("index"))

        order = [stop - 1 for stop in result.tour]
        route_html = build_route_map(coords, names, order, road)

        # Prepare itinerary INCLUDING return to start
        itinerary = []
        for i, node in enumerate(order):
            leg_km = 0.0 if i == 0 else tour_length(dist, result.tour[i - 1:i + 1])
            itinerary.append({
                "visit": i + 1,
                "stop": node + 1,
                "index": sites[node].index,
                "name": names[node],
                "address": sites[node].address,
                "lat": coords[node][0],
                "lon": coords[node][1],
                "leg_km": round(leg_km, 3),
            })

        return render_template(
            "results.html",
            route_html=route_html,
            total_km=round(result.length, 3),
            itinerary=itinerary,
            solver_name=SOLVER_NAMES[result.solver],
            elapsed_seconds=round(result.elapsed_seconds, 2),
            distance_kind="driving" if road else "great-circle",
        )

    return render_template(
        "index.html",
        max_points=settings.MAX_POINTS,
        max_brute_force_points=settings.MAX_BRUTE_FORCE_POINTS,
    )


if __name__ == "__main__":
    app.run(debug=True)
