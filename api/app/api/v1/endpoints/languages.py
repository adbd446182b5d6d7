"""
Languages endpoint: read-only browsing of the language dataset.
"""
from fastapi import APIRouter, Depends, HTTPException, Query, status
from typing import Optional

from app.core.data_store import DataStore, get_store
from app.models.enums import LanguageSortBy
from app.schemas.culture import CultureInfoResponse
from app.schemas.family import CountryLanguageInfo, LanguageFamiliesResponse, LanguageFamilyDetail
from app.schemas.filter import FilterOptions
from app.schemas.language import (
    CompareLanguagesResponse,
    ExtendedLanguageDetail,
    Language,
    LanguagesResponse,
)
from app.schemas.resource import LearningResourcesResponse
from app.services import country_service, family_service, filter_service, language_service

router = APIRouter(prefix="/languages", tags=["languages"])


def _language_not_found(language_id: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"Language '{language_id}' not found"
    )


@router.get("", response_model=LanguagesResponse)
async def get_languages(
    fsi_categories: Optional[str] = Query(None, description="Comma-separated FSI categories, e.g. 1,2"),
    families: Optional[str] = Query(None, description="Comma-separated language families"),
    regions: Optional[str] = Query(None, description="Comma-separated countries"),
    search: Optional[str] = None,
    difficulty_min: Optional[int] = None,
    difficulty_max: Optional[int] = None,
    hours_min: Optional[int] = None,
    hours_max: Optional[int] = None,
    speakers_min: Optional[int] = None,
    speakers_max: Optional[int] = None,
    sort_by: LanguageSortBy = LanguageSortBy.NAME,
    store: DataStore = Depends(get_store)
):
    """
    Get all languages, optionally filtered, searched and sorted.

    When `search` is given, results are ordered by match score instead of `sort_by`.
    """
    language_filter = filter_service.build_language_filter(
        fsi_categories=fsi_categories,
        families=families,
        regions=regions,
        search=search,
        difficulty_min=difficulty_min,
        difficulty_max=difficulty_max,
        hours_min=hours_min,
        hours_max=hours_max,
        speakers_min=speakers_min,
        speakers_max=speakers_max,
        sort_by=sort_by,
    )
    languages = filter_service.apply_language_filter(
        language_service.get_all_languages(store), language_filter
    )
    return LanguagesResponse(languages=languages, total=len(languages))


@router.get("/featured", response_model=LanguagesResponse)
async def get_featured_languages(store: DataStore = Depends(get_store)):
    """Get up to four featured languages for the home page."""
    languages = language_service.get_featured_languages(store)
    return LanguagesResponse(languages=languages, total=len(languages))


@router.get("/filters", response_model=FilterOptions)
async def get_filter_options(store: DataStore = Depends(get_store)):
    """Get the values and numeric bounds available for filtering."""
    return filter_service.build_filter_options(language_service.get_all_languages(store))


@router.get("/compare", response_model=CompareLanguagesResponse)
async def compare_languages(
    ids: str = Query(..., description="Comma-separated language ids"),
    store: DataStore = Depends(get_store)
):
    """Get several languages side by side. Unknown ids are listed in `not_found`."""
    return language_service.compare_languages(store, filter_service.parse_csv(ids))


@router.get("/families", response_model=LanguageFamiliesResponse)
async def get_language_families(
    by_difficulty: bool = Query(False, description="Only families present in the dataset, easiest first"),
    store: DataStore = Depends(get_store)
):
    """Get the language families with their language counts and average difficulty."""
    if by_difficulty:
        families = family_service.get_families_by_difficulty(store)
    else:
        families = family_service.calculate_family_stats(store)
    return LanguageFamiliesResponse(families=families, total=len(families))


@router.get("/families/{family_id}", response_model=LanguageFamilyDetail)
async def get_language_family(
    family_id: str,
    store: DataStore = Depends(get_store)
):
    """Get one family and its languages."""
    family = family_service.get_family_detail(store, family_id)
    if family is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Language family '{family_id}' not found"
        )
    return family


@router.get("/countries/{country}", response_model=CountryLanguageInfo)
async def get_country_languages(
    country: str,
    store: DataStore = Depends(get_store)
):
    """Get the languages spoken in a country and their average difficulty."""
    info = country_service.get_country_language_info(store, country)
    if info is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Country '{country}' not found"
        )
    return info


@router.get("/{language_id}", response_model=Language)
async def get_language(
    language_id: str,
    store: DataStore = Depends(get_store)
):
    """Get a single language by exact id."""
    language = language_service.get_language_by_id(store, language_id)
    if language is None:
        raise _language_not_found(language_id)
    return language


@router.get("/{language_id}/detail", response_model=ExtendedLanguageDetail)
async def get_language_detail(
    language_id: str,
    store: DataStore = Depends(get_store)
):
    """Get the full detail view: speaker stats, geography, resources and culture."""
    detail = language_service.get_language_detail_data(store, language_id)
    if detail is None:
        raise _language_not_found(language_id)
    return detail


@router.get("/{language_id}/resources", response_model=LearningResourcesResponse)
async def get_language_resources(
    language_id: str,
    store: DataStore = Depends(get_store)
):
    """Get the learning resources of a language."""
    if language_service.get_language_by_id(store, language_id) is None:
        raise _language_not_found(language_id)
    return LearningResourcesResponse(
        language_id=language_id,
        resources=language_service.get_learning_resources(store, language_id),
    )


@router.get("/{language_id}/culture", response_model=CultureInfoResponse)
async def get_language_culture(
    language_id: str,
    store: DataStore = Depends(get_store)
):
    """Get the culture info of a language, or the default template when none is stored."""
    language = language_service.get_language_by_id(store, language_id)
    if language is None:
        raise _language_not_found(language_id)
    return CultureInfoResponse(
        language_id=language_id,
        culture=language_service.get_culture_info(store, language_id, language.name),
        has_custom_info=language_service.has_custom_culture_info(store, language_id),
    )
