"""
I want a simple, light-weight way to pass-around and manipulate points and spans within a collection of source texts.
The concept is simple: Use integers, with spans of them associated to specific segments of text.
A segment is a file, or one line typed into the REPL.
"""
from bisect import bisect_right
from pathlib import Path
from typing import NamedTuple, Optional
from boozetools.support.failureprone import SourceText

class Span(NamedTuple):
	""" Aimed at whatever prints error messages """
	path: Optional[Path]
	source: SourceText
	slice: slice

_slices: list[slice] = []
_bounds: list[int] = []
_paths: list[Optional[Path]] = []
_sources: list[SourceText] = []

def reset_location_index():
	for it in _slices, _bounds, _paths, _sources: it.clear()
	# Now prepare the "no particular place" location, which is location zero:
	start_segment(None, "")
	insert_token(slice(0,0))

def start_segment(path:Optional[Path], text:str):
	assert isinstance(path, Path) or path is None
	_bounds.append(len(_slices))
	_paths.append(path)
	_sources.append(SourceText(text, filename=None if path is None else str(path)))

def insert_token(s:slice) -> int:
	index = len(_slices)
	_slices.append(s)
	return index

def lookup_token(index:int) -> Span:
	segment_index = bisect_right(_bounds, index)-1
	return Span(_paths[segment_index], _sources[segment_index], _slices[index])

def lookup_span(first: int, last:int) -> Span:
	left = lookup_token(first)
	right = lookup_token(last)
	assert left.source is right.source
	return Span(left.path, left.source, slice(left.slice.start, max(left.slice.stop, right.slice.stop)))

reset_location_index()
